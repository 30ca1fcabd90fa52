"""
DPD shipment services: request mapping, transports, service variants and the gateway workflow.
"""
