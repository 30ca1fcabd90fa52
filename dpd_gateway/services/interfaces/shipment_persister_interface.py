from abc import ABC, abstractmethod

from dpd_gateway.models.shipment import ShipmentRecord


class IShipmentPersister(ABC):
    """Stores tracking number / labels / state mutations (idempotent, synchronous)"""

    @abstractmethod
    def persist(self, shipment: ShipmentRecord) -> None:
        pass
