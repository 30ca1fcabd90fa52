"""
Domain models handed to the gateway by the order system.
"""

from .address import Address, Customer, OpeningHour, RelayPoint, Sale
from .gateway import Capability, GatewayAction, Requirement
from .shipment import Label, LabelFormat, LabelSize, LabelType, ShipmentRecord, ShipmentState

__all__ = [
    "Address",
    "Customer",
    "OpeningHour",
    "RelayPoint",
    "Sale",
    "Capability",
    "GatewayAction",
    "Requirement",
    "Label",
    "LabelFormat",
    "LabelSize",
    "LabelType",
    "ShipmentRecord",
    "ShipmentState",
]
