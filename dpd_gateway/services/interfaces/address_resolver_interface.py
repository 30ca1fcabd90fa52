from abc import ABC, abstractmethod

from dpd_gateway.models.address import Address
from dpd_gateway.models.shipment import ShipmentRecord


class IAddressResolver(ABC):
    """Resolves the final receiver / sender addresses of a shipment"""

    @abstractmethod
    def resolve_receiver_address(self, shipment: ShipmentRecord, strict: bool = False) -> Address:
        """
        Returns the receiver address of the shipment

        Args:
            shipment: The shipment (or parcel owner)
            strict: Whether a concrete address is required. When False, the
                shipment relay point may be returned instead.
        """
        pass

    @abstractmethod
    def resolve_sender_address(self, shipment: ShipmentRecord, strict: bool = False) -> Address:
        """Returns the sender address of the shipment"""
        pass
