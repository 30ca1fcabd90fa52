"""
Service Interfaces

Transports and external collaborators consumed by the gateway.
"""

from .address_resolver_interface import IAddressResolver
from .eprint_transport_interface import IEPrintTransport
from .pudo_transport_interface import IPudoTransport
from .shipment_calculator_interface import IShipmentCalculator
from .shipment_gateway_interface import IShipmentGateway
from .shipment_persister_interface import IShipmentPersister

__all__ = [
    "IAddressResolver",
    "IEPrintTransport",
    "IPudoTransport",
    "IShipmentCalculator",
    "IShipmentGateway",
    "IShipmentPersister",
]
