"""
DPD shipment gateway

Translates shipment records into DPD EPrint / PUDO requests and reconciles
the replies (tracking numbers, labels, relay points).
"""

from dpd_gateway.factories.dpd_platform import DpdPlatform
from dpd_gateway.services.shipments.dpd_gateway import DpdGateway

__version__ = "1.0.0"

__all__ = [
    "DpdPlatform",
    "DpdGateway",
]
