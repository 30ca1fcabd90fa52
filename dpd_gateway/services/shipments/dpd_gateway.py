from decimal import Decimal
from typing import Callable, FrozenSet, Iterable, List, Optional, TypeVar
import logging

from dpd_gateway.core.exceptions import (
    ConsistencyException,
    ExceptionFactory,
    LabelUnavailableException,
    PreconditionException,
    ShipmentGatewayException,
    UnsupportedActionException,
)
from dpd_gateway.core.settings import DpdSettings
from dpd_gateway.models.address import Address
from dpd_gateway.models.gateway import Capability, GatewayAction, Requirement
from dpd_gateway.models.shipment import Label, LabelType, ShipmentRecord, ShipmentState
from dpd_gateway.schemas.dpd_configuration_schema import PLATFORM_NAME, GatewayConfig
from dpd_gateway.schemas.dpd_relay_schema import GetRelayPointResponse, ListRelayPointResponse
from dpd_gateway.schemas.dpd_shipment_schema import ReceiveLabelRequest
from dpd_gateway.services.interfaces.address_resolver_interface import IAddressResolver
from dpd_gateway.services.interfaces.eprint_transport_interface import IEPrintTransport
from dpd_gateway.services.interfaces.pudo_transport_interface import IPudoTransport
from dpd_gateway.services.interfaces.shipment_calculator_interface import IShipmentCalculator
from dpd_gateway.services.interfaces.shipment_gateway_interface import IShipmentGateway
from dpd_gateway.services.interfaces.shipment_persister_interface import IShipmentPersister
from dpd_gateway.services.shipments.dpd_client import DpdApiError, EPrintClient, PudoClient
from dpd_gateway.services.shipments.dpd_label_catalog import get_label_format_and_size
from dpd_gateway.services.shipments.dpd_label_reconciler import DpdLabelReconciler
from dpd_gateway.services.shipments.dpd_mapper import DpdMapper
from dpd_gateway.services.shipments.dpd_service_variants import SERVICE_VARIANTS, RelayLookupMixin
from dpd_gateway.services.shipments.dpd_tracking import build_prove_url, build_track_url

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")


class DpdGateway(IShipmentGateway):
    """DPD shipment gateway: one configured service, shared ship / label / track workflow"""

    def __init__(
        self,
        name: str,
        config: GatewayConfig,
        address_resolver: IAddressResolver,
        persister: IShipmentPersister,
        calculator: IShipmentCalculator,
        eprint: Optional[IEPrintTransport] = None,
        pudo: Optional[IPudoTransport] = None,
        settings: Optional[DpdSettings] = None
    ):
        self.name = name
        self.config = config
        self.variant = SERVICE_VARIANTS[config.service]
        self.address_resolver = address_resolver
        self.persister = persister
        self.mapper = DpdMapper(config, address_resolver, calculator)
        self.reconciler = DpdLabelReconciler()

        # Transports are built once and kept for the gateway lifetime
        self.eprint = eprint if eprint is not None else EPrintClient(config, settings)
        self.pudo = pudo
        if self.pudo is None and self.variant.capabilities & Capability.RELAY:
            self.pudo = PudoClient(config, settings)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def get_name(self) -> str:
        return self.name

    def get_platform_name(self) -> str:
        return PLATFORM_NAME

    def get_actions(self) -> FrozenSet[GatewayAction]:
        return self.variant.actions

    def get_capabilities(self) -> Capability:
        return self.variant.capabilities

    def get_requirements(self) -> Requirement:
        return self.variant.requirements

    def get_max_weight(self) -> Optional[Decimal]:
        return self.variant.max_weight

    def get_default_label_types(self) -> List[LabelType]:
        return list(self.variant.default_label_types)

    def supports_action(self, action: GatewayAction) -> bool:
        return action in self.variant.actions

    def support_shipment(self, record: ShipmentRecord, throw: bool = True) -> bool:
        return self.variant.support_shipment(self, record, throw)

    # ------------------------------------------------------------------
    # Shipment workflow
    # ------------------------------------------------------------------

    def ship(self, shipment: ShipmentRecord) -> bool:
        """
        Create the shipment through EPrint

        Args:
            shipment: Whole shipment (with or without parcels)

        Returns:
            True when created, False when already shipped or when DPD created nothing
        """
        self._assert_action(GatewayAction.SHIP)
        self._assert_shipment(shipment)
        self.support_shipment(shipment)

        if shipment.has_tracking_number():
            logger.info(f"Shipment {shipment.number} already has its tracking number(s), skipping")
            if shipment.state == ShipmentState.NEW:
                self._mark_created(shipment)
            return False

        if shipment.has_parcels():
            success = self._do_multi_shipment(shipment)
        else:
            success = self._do_single_shipment(shipment)

        if not success:
            return False

        if shipment.state == ShipmentState.NEW:
            self._mark_created(shipment)

        return True

    def cancel(self, shipment: ShipmentRecord) -> bool:
        self._assert_action(GatewayAction.CANCEL)
        self._assert_shipment(shipment)
        self.support_shipment(shipment)

        result = False
        if self.variant.do_cancel(self, shipment):
            self.persister.persist(shipment)
            result = True

        # A NEW record with tracking numbers already exists on the carrier side
        if shipment.state == ShipmentState.NEW and shipment.has_tracking_number():
            logger.warning(f"Shipment {shipment.number} was created by DPD, not cancelling it locally")
            return result

        if shipment.state in (ShipmentState.NEW, ShipmentState.PENDING):
            shipment.state = ShipmentState.CANCELED
            self.persister.persist(shipment)
            return True

        return result

    def complete(self, shipment: ShipmentRecord) -> bool:
        self._assert_action(GatewayAction.COMPLETE)
        self._assert_shipment(shipment)
        self.support_shipment(shipment)

        if shipment.state != ShipmentState.PENDING:
            return False

        shipment.state = ShipmentState.COMPLETED
        self.persister.persist(shipment)

        return True

    def print_label(self, shipment: ShipmentRecord, types: Optional[Iterable[LabelType]] = None) -> List[Label]:
        """
        Return the labels of a shipment or a parcel, shipping it first if needed

        Args:
            shipment: Shipment or parcel
            types: Wanted label types (the service defaults when empty)

        Returns:
            Stored labels of the wanted types, parcels in order
        """
        self._assert_action(GatewayAction.PRINT_LABEL)
        self.support_shipment(shipment)

        owner = shipment.get_owner()
        self.ship(owner)
        if not owner.has_tracking_number():
            raise LabelUnavailableException(
                "DPD created no shipment, no label to print.",
                details={"number": owner.number}
            )

        wanted = list(types) if types else self.get_default_label_types()

        targets = shipment.parcels if shipment.has_parcels() else [shipment]

        labels: List[Label] = []
        for target in targets:
            if not target.has_labels() and not self.get_label(target):
                raise LabelUnavailableException(details={"number": target.number})

            labels.extend(target.get_labels(wanted))

        return labels

    def get_label(self, record: ShipmentRecord) -> bool:
        """
        Fetch the labels of a shipment or a parcel through GetLabelBc

        Returns:
            Whether at least one label was retrieved
        """
        if not record.tracking_number:
            raise ExceptionFactory.tracking_number_missing(record.number)

        request = ReceiveLabelRequest(
            customer=self.mapper.build_customer(),
            label_type=self.mapper.build_label_type(),
            shipment_number=record.tracking_number,
        )

        result = self.remote(self.eprint.get_label, request)

        label_format, label_size = get_label_format_and_size(request.label_type.type)
        if not self.reconciler.merge(record, result.labels, label_format, label_size):
            return False

        self.persister.persist(record.get_owner())

        return True

    def track(self, shipment: ShipmentRecord) -> Optional[str]:
        if not self.supports_action(GatewayAction.TRACK):
            return None

        self.support_shipment(shipment)

        if shipment.tracking_number:
            return build_track_url(shipment.tracking_number, self.config.country_code, self.config.center_number)

        return None

    def prove(self, shipment: ShipmentRecord) -> Optional[str]:
        if not self.supports_action(GatewayAction.PROVE):
            return None

        self.support_shipment(shipment)

        if shipment.tracking_number:
            return build_prove_url(shipment.tracking_number, self.config.country_code, self.config.center_number)

        return None

    # ------------------------------------------------------------------
    # Relay points
    # ------------------------------------------------------------------

    def list_relay_points(self, address: Address, weight: Decimal) -> ListRelayPointResponse:
        self._assert_action(GatewayAction.LIST_RELAY_POINTS)

        return self._relay_variant().list_relay_points(self, address, weight)

    def get_relay_point(self, number: str) -> GetRelayPointResponse:
        self._assert_action(GatewayAction.GET_RELAY_POINT)

        return self._relay_variant().get_relay_point(self, number)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def remote(self, operation: Callable[[RequestT], ResultT], request: RequestT) -> ResultT:
        """Run a transport operation, wrapping its failure into ShipmentGatewayException"""
        try:
            return operation(request)
        except DpdApiError as e:
            logger.error(f"{self.name}: DPD call failed (Code: {e.code}): {e.message}")
            raise ShipmentGatewayException(e.message, e.code) from e

    def _do_single_shipment(self, shipment: ShipmentRecord) -> bool:
        outcome = self.variant.submit_single(self, shipment)
        if outcome is None:
            logger.warning(f"DPD created no shipment for {shipment.number}")
            return False

        shipment.assign_tracking_number(outcome.tracking_number)

        if outcome.labels:
            self.reconciler.merge(shipment, outcome.labels, outcome.label_format, outcome.label_size)

        return True

    def _do_multi_shipment(self, shipment: ShipmentRecord) -> bool:
        request = self.variant.build_multi_request(self, shipment)
        result = self.remote(self.eprint.create_multi_shipment, request)

        parcels = shipment.parcels
        if len(result.shipments) != len(parcels):
            logger.error(
                f"DPD returned {len(result.shipments)} shipments for the {len(parcels)} parcels of {shipment.number}"
            )
            raise ExceptionFactory.parcel_count_mismatch(len(parcels), len(result.shipments))

        # Slave i is parcel i
        for parcel, item in zip(parcels, result.shipments):
            parcel.assign_tracking_number(item.shipment.barcode_id)

        if not shipment.has_tracking_number():
            raise ConsistencyException(
                "Failed to set all parcel's tracking numbers.",
                details={"number": shipment.number}
            )

        # Created on the carrier side: kept even if a label fetch fails below
        self._mark_created(shipment)

        for parcel in parcels:
            if not self.get_label(parcel):
                raise LabelUnavailableException(details={"number": parcel.number})

        return True

    def _mark_created(self, shipment: ShipmentRecord) -> None:
        shipment.state = ShipmentState.PENDING if shipment.is_return else ShipmentState.SHIPPED
        self.persister.persist(shipment)

        logger.info(f"Shipment {shipment.number} created through {self.name} ({shipment.state.value})")

    def _relay_variant(self) -> RelayLookupMixin:
        if not isinstance(self.variant, RelayLookupMixin) or self.pudo is None:
            raise UnsupportedActionException("relay points", self.name)
        return self.variant

    def _assert_action(self, action: GatewayAction) -> None:
        if not self.supports_action(action):
            raise UnsupportedActionException(action.value, self.name)

    @staticmethod
    def _assert_shipment(record: ShipmentRecord) -> None:
        if record.is_parcel:
            raise PreconditionException(
                "Expected a shipment, got a parcel.",
                details={"number": record.number}
            )
