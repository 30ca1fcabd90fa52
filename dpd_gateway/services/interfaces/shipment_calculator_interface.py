from abc import ABC, abstractmethod
from decimal import Decimal

from dpd_gateway.models.shipment import ShipmentRecord


class IShipmentCalculator(ABC):
    """Computes weight and goods value of a whole shipment"""

    @abstractmethod
    def calculate_weight(self, shipment: ShipmentRecord) -> Decimal:
        """Total weight (kg) of the shipment's items"""
        pass

    @abstractmethod
    def calculate_goods_value(self, shipment: ShipmentRecord) -> Decimal:
        """Total value of the shipment's goods (insurance fallback)"""
        pass
