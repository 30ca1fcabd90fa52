"""
Core

Exceptions and settings shared by the gateway modules.
"""
