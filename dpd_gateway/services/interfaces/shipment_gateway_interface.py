from abc import ABC, abstractmethod
from decimal import Decimal
from typing import FrozenSet, Iterable, List, Optional

from dpd_gateway.models.address import Address
from dpd_gateway.models.gateway import Capability, GatewayAction, Requirement
from dpd_gateway.models.shipment import Label, LabelType, ShipmentRecord
from dpd_gateway.schemas.dpd_relay_schema import GetRelayPointResponse, ListRelayPointResponse


class IShipmentGateway(ABC):
    """Common interface of the shipment gateways

    Callers must consult get_actions() / get_capabilities() before invoking an
    operation: calling an undeclared action raises UnsupportedActionException.
    """

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_actions(self) -> FrozenSet[GatewayAction]:
        pass

    @abstractmethod
    def get_capabilities(self) -> Capability:
        pass

    @abstractmethod
    def get_requirements(self) -> Requirement:
        pass

    @abstractmethod
    def get_max_weight(self) -> Optional[Decimal]:
        pass

    @abstractmethod
    def ship(self, shipment: ShipmentRecord) -> bool:
        """
        Creates the shipment on the carrier side

        Returns:
            False when the shipment already has its tracking number or when
            the carrier created nothing, True otherwise.
        """
        pass

    @abstractmethod
    def cancel(self, shipment: ShipmentRecord) -> bool:
        pass

    @abstractmethod
    def complete(self, shipment: ShipmentRecord) -> bool:
        pass

    @abstractmethod
    def print_label(self, shipment: ShipmentRecord, types: Optional[Iterable[LabelType]] = None) -> List[Label]:
        pass

    @abstractmethod
    def track(self, shipment: ShipmentRecord) -> Optional[str]:
        pass

    @abstractmethod
    def prove(self, shipment: ShipmentRecord) -> Optional[str]:
        pass

    @abstractmethod
    def list_relay_points(self, address: Address, weight: Decimal) -> ListRelayPointResponse:
        pass

    @abstractmethod
    def get_relay_point(self, number: str) -> GetRelayPointResponse:
        pass
