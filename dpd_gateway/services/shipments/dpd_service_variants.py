"""
DPD service variants.

Each service code (Classic, Predict, Relay, Return, RelayReturn) is served by one
stateless variant object selected from SERVICE_VARIANTS when the gateway is
built. A variant declares what the gateway can do (actions, capabilities,
requirements, max weight, default label types) and how it builds and submits
the carrier requests. The gateway owns the shared workflow.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional, Tuple
import hashlib
import logging

from dpd_gateway.core.exceptions import (
    ErrorCode,
    PreconditionException,
    UnsupportedShipmentException,
)
from dpd_gateway.models.address import Address, OpeningHour, RelayPoint
from dpd_gateway.models.gateway import Capability, GatewayAction, Requirement
from dpd_gateway.models.shipment import LabelFormat, LabelSize, LabelType, ShipmentRecord, ShipmentState
from dpd_gateway.schemas.dpd_configuration_schema import PLATFORM_NAME, DpdService
from dpd_gateway.schemas.dpd_relay_schema import (
    GetPudoDetailsRequest,
    GetPudoListRequest,
    GetRelayPointResponse,
    ListRelayPointResponse,
    PudoItem,
)
from dpd_gateway.schemas.dpd_shipment_schema import (
    CarrierLabel,
    CollectionRequest,
    CollectionRequestServices,
    ContactCollectionRequest,
    ContactType,
    MultiShipmentRequest,
    ParcelShop,
    ReverseShipmentLabelRequest,
    ShopAddress,
    StdServices,
    StdShipmentLabelRequest,
    TerminateCollectionRequest,
)
from dpd_gateway.services.shipments.dpd_label_catalog import get_label_format_and_size
from dpd_gateway.services.shipments.dpd_mapper import DATE_FORMAT, format_date, format_decimal

if TYPE_CHECKING:
    from dpd_gateway.services.shipments.dpd_gateway import DpdGateway

logger = logging.getLogger(__name__)


# Collection request values used when the shipment gateway data is empty
COLLECTION_DEFAULTS: Dict[str, Any] = {
    "insurance": 0,
    "parcel_count": 1,
    "pick_date": None,
    "time_from": "09:00",
    "time_to": "12:00",
    "remark": "",
    "pick_remark": "",
    "delivery_remark": "",
}

# Days between the shipping date and the reverse shipment expiry (min 7)
REVERSE_EXPIRE_OFFSET = 15

# Relay points are looked up for a pickup two days ahead
RELAY_PICKUP_DELAY = timedelta(days=2)

REQUEST_ID_LENGTH = 30


@dataclass
class SingleShipmentOutcome:
    """What the carrier created for a shipment without parcels"""
    tracking_number: str
    labels: List[CarrierLabel] = field(default_factory=list)
    label_format: Optional[LabelFormat] = None
    label_size: Optional[LabelSize] = None


class DpdServiceVariant:
    """Classic delivery: base requests, shipments with or without parcels"""

    service = DpdService.CLASSIC
    actions: FrozenSet[GatewayAction] = frozenset({
        GatewayAction.SHIP,
        GatewayAction.CANCEL,
        GatewayAction.PRINT_LABEL,
        GatewayAction.TRACK,
        GatewayAction.PROVE,
    })
    capabilities = Capability.SHIPMENT | Capability.PARCEL
    requirements = Requirement.NONE
    max_weight = Decimal(30)
    default_label_types: Tuple[LabelType, ...] = (LabelType.SHIPMENT,)
    contact_type = ContactType.AUTOMATIC_MAIL

    def support_shipment(self, gateway: "DpdGateway", record: ShipmentRecord, throw: bool = True) -> bool:
        """
        Check that the record (or its owning shipment) can be handled by this service

        Args:
            gateway: Gateway running the check
            record: Shipment or parcel
            throw: Whether to raise instead of returning False

        Returns:
            Whether the record is supported
        """
        shipment = record.get_owner()

        if shipment.is_return and not self.capabilities & Capability.RETURN:
            return _unsupported(gateway, shipment, "Return shipments are not supported.", throw)

        if not shipment.is_return and not self.capabilities & Capability.SHIPMENT:
            return _unsupported(gateway, shipment, "Only return shipments are supported.", throw)

        return True

    def build_single_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> StdShipmentLabelRequest:
        return gateway.mapper.build_single_request(shipment, self.contact_type)

    def submit_single(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> Optional[SingleShipmentOutcome]:
        """
        Create a shipment without parcels

        Returns:
            None when the carrier created nothing
        """
        request = self.build_single_request(gateway, shipment)
        result = gateway.remote(gateway.eprint.create_shipment_with_labels, request)

        if not result.shipments:
            return None

        label_format, label_size = get_label_format_and_size(request.label_type.type)

        return SingleShipmentOutcome(
            tracking_number=result.shipments[0].shipment.barcode_id,
            labels=result.labels,
            label_format=label_format,
            label_size=label_size,
        )

    def build_multi_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> MultiShipmentRequest:
        return gateway.mapper.build_multi_request(shipment, self.contact_type)

    def do_cancel(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> bool:
        """Carrier side cancellation (none for regular deliveries)"""
        return False


class PredictVariant(DpdServiceVariant):
    """SMS notified delivery: the receiver must have a mobile phone number"""

    service = DpdService.PREDICT
    capabilities = Capability.SHIPMENT
    requirements = Requirement.MOBILE
    # Only the contact type differs from Classic, the requested insurance is still sent
    contact_type = ContactType.PREDICT

    def support_shipment(self, gateway: "DpdGateway", record: ShipmentRecord, throw: bool = True) -> bool:
        if not super().support_shipment(gateway, record, throw):
            return False

        receiver = gateway.address_resolver.resolve_receiver_address(record.get_owner(), True)
        if not receiver.mobile:
            return _unsupported(
                gateway, record.get_owner(),
                "Receiver address must have a mobile phone number.", throw,
                ErrorCode.MOBILE_MISSING
            )

        return True


class RelayLookupMixin:
    """Relay point lookups through the PUDO web service"""

    def list_relay_points(self, gateway: "DpdGateway", address: Address, weight: Decimal) -> ListRelayPointResponse:
        """
        List the relay points around an address

        Args:
            gateway: Gateway owning the PUDO transport
            address: Searched address
            weight: Shipment weight (not used by PUDO)

        Returns:
            ListRelayPointResponse in PUDO order
        """
        country = gateway.config.pudo.country_code
        date_from = (datetime.now() + RELAY_PICKUP_DELAY).strftime(DATE_FORMAT)

        request = GetPudoListRequest(
            address=address.street,
            zip_code=address.postal_code,
            city=address.city,
            countrycode=country,
            date_from=date_from,
            request_id=build_request_id(address.street, address.postal_code, address.city, country, date_from),
        )

        response = gateway.remote(gateway.pudo.get_pudo_list, request)

        result = ListRelayPointResponse()
        for item in response.items:
            result.add_relay_point(transform_item_to_relay_point(item, country))

        logger.info(f"DPD PUDO returned {len(result.relay_points)} relay points around {address.postal_code} {address.city}")

        return result

    def get_relay_point(self, gateway: "DpdGateway", number: str) -> GetRelayPointResponse:
        request = GetPudoDetailsRequest(pudo_id=number)

        response = gateway.remote(gateway.pudo.get_pudo_details, request)

        return GetRelayPointResponse(
            relay_point=transform_item_to_relay_point(response.item, gateway.config.pudo.country_code)
        )


class RelayVariant(RelayLookupMixin, DpdServiceVariant):
    """Relay point delivery (single parcel only)"""

    service = DpdService.RELAY
    actions = frozenset({
        GatewayAction.SHIP,
        GatewayAction.CANCEL,
        GatewayAction.PRINT_LABEL,
        GatewayAction.LIST_RELAY_POINTS,
        GatewayAction.GET_RELAY_POINT,
        GatewayAction.TRACK,
    })
    capabilities = Capability.SHIPMENT | Capability.RELAY
    max_weight = Decimal(20)

    def build_single_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> StdShipmentLabelRequest:
        relay = gateway.address_resolver.resolve_receiver_address(shipment)
        if not isinstance(relay, RelayPoint):
            raise PreconditionException(
                "Expected a relay point as receiver address.",
                ErrorCode.RELAY_POINT_MISSING,
                {"number": shipment.number}
            )

        request = super().build_single_request(gateway, shipment)

        if request.services is None:
            request.services = StdServices()
        request.services.parcelshop = ParcelShop(shopaddress=ShopAddress(shopid=relay.number))

        return request

    def build_multi_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> MultiShipmentRequest:
        raise UnsupportedShipmentException(
            "DPD relay delivery does not support parcels shipment.",
            {"number": shipment.number, "gateway": gateway.get_name()}
        )


class ReturnVariant(DpdServiceVariant):
    """Return through a collection request: DPD picks the parcel up"""

    service = DpdService.RETURN
    actions = frozenset({
        GatewayAction.SHIP,
        GatewayAction.CANCEL,
        GatewayAction.COMPLETE,
        GatewayAction.TRACK,
    })
    capabilities = Capability.RETURN
    default_label_types = (LabelType.RETURN,)

    def build_collection_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> CollectionRequest:
        """
        Build the CreateCollectionRequestBc request

        Args:
            gateway: Gateway owning the mapper and the config
            shipment: Return shipment without parcels

        Returns:
            CollectionRequest scheduled from the shipment gateway data
        """
        _assert_single_return(shipment)

        mapper = gateway.mapper
        receiver = gateway.address_resolver.resolve_receiver_address(shipment, True)
        shipper = gateway.address_resolver.resolve_sender_address(shipment, True)

        sale = shipment.get_sale()
        mobile = shipper.mobile
        if mobile is None and sale is not None and sale.customer is not None:
            mobile = sale.customer.mobile

        services = CollectionRequestServices(contact=ContactCollectionRequest(
            type=ContactType.AUTOMATIC_MAIL,
            email=gateway.config.admin_email,
            shipper_email=sale.email if sale is not None else None,
            shipper_mobil=mapper.address_mapper.format_phone_number(mobile) if mobile else None,
        ))

        data = dict(COLLECTION_DEFAULTS)
        data.update({key: value for key, value in shipment.gateway_data.items() if value})

        if data["insurance"]:
            services.extra_insurance = mapper.build_extra_insurance(shipment)

        request = CollectionRequest(
            **mapper.build_customer_identity(),
            receiveraddress=mapper.address_mapper.build_address(receiver),
            shipperaddress=mapper.address_mapper.build_address(shipper),
            services=services,
            parcel_count=int(data["parcel_count"]),
            pick_date=_format_pick_date(data["pick_date"]),
            time_from=data["time_from"],
            time_to=data["time_to"],
            remark=data["remark"],
            pick_remark=data["pick_remark"],
            delivery_remark=data["delivery_remark"],
            referencenumber=shipment.number,
            reference2=sale.number if sale is not None else None,
        )

        logger.debug(f"DPD collection request for {shipment.number}: {request.model_dump(by_alias=True, exclude_none=True)}")

        return request

    def submit_single(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> Optional[SingleShipmentOutcome]:
        request = self.build_collection_request(gateway, shipment)
        result = gateway.remote(gateway.eprint.create_collection_request, request)

        if not result.shipments:
            return None

        # Labels are only available later, through GetLabelBc
        return SingleShipmentOutcome(tracking_number=result.shipments[0].shipment.barcode_id)

    def build_multi_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> MultiShipmentRequest:
        raise UnsupportedShipmentException(
            "DPD return does not support parcels shipment.",
            {"number": shipment.number, "gateway": gateway.get_name()}
        )

    def do_cancel(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> bool:
        """Terminate the collection request while the pickup is pending"""
        if shipment.state != ShipmentState.PENDING:
            return False

        request = TerminateCollectionRequest(
            parcel=gateway.mapper.build_parcel(shipment),
            customer=gateway.mapper.build_customer(),
        )
        gateway.remote(gateway.eprint.terminate_collection_request, request)

        logger.info(f"DPD collection request {shipment.tracking_number} terminated")

        return True


class RelayReturnVariant(RelayLookupMixin, DpdServiceVariant):
    """Return dropped at a relay point (reverse shipment)"""

    service = DpdService.RELAY_RETURN
    actions = frozenset({
        GatewayAction.SHIP,
        GatewayAction.CANCEL,
        GatewayAction.COMPLETE,
        GatewayAction.PRINT_LABEL,
        GatewayAction.TRACK,
        GatewayAction.LIST_RELAY_POINTS,
        GatewayAction.GET_RELAY_POINT,
    })
    capabilities = Capability.RETURN | Capability.RELAY
    max_weight = Decimal(20)
    default_label_types = (LabelType.RETURN, LabelType.PROOF)

    def build_reverse_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> ReverseShipmentLabelRequest:
        """Build the CreateReverseInverseShipmentWithLabels request (insurance is not supported)"""
        _assert_single_return(shipment)
        if shipment.relay_point is None:
            raise PreconditionException(
                "Expected return shipment with relay point.",
                ErrorCode.RELAY_POINT_MISSING,
                {"number": shipment.number}
            )

        mapper = gateway.mapper
        receiver = gateway.address_resolver.resolve_receiver_address(shipment, True)
        # No relay point for the shipper
        shipper = gateway.address_resolver.resolve_sender_address(shipment, True)

        request = ReverseShipmentLabelRequest(
            **mapper.build_customer_identity(),
            label_type=mapper.build_label_type(),
            receiveraddress=mapper.address_mapper.build_address(receiver),
            receiverinfo=mapper.address_mapper.build_address_info(receiver),
            shipperaddress=mapper.address_mapper.build_address(shipper),
            weight=format_decimal(mapper.resolve_weight(shipment)),
            expire_offset=REVERSE_EXPIRE_OFFSET,
            refasbarcode=True,
            shippingdate=format_date(),
            referencenumber=shipment.number,
        )

        logger.debug(f"DPD reverse shipment request for {shipment.number}: {request.model_dump(by_alias=True, exclude_none=True)}")

        return request

    def submit_single(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> Optional[SingleShipmentOutcome]:
        request = self.build_reverse_request(gateway, shipment)
        result = gateway.remote(gateway.eprint.create_reverse_shipment_with_labels, request)

        if result.shipment is None:
            return None

        label_format, label_size = get_label_format_and_size(request.label_type.type)

        return SingleShipmentOutcome(
            tracking_number=result.shipment.parcelnumber,
            labels=result.labels,
            label_format=label_format,
            label_size=label_size,
        )

    def build_multi_request(self, gateway: "DpdGateway", shipment: ShipmentRecord) -> MultiShipmentRequest:
        raise UnsupportedShipmentException(
            "DPD relay return does not support parcels shipment.",
            {"number": shipment.number, "gateway": gateway.get_name()}
        )


SERVICE_VARIANTS: Dict[DpdService, DpdServiceVariant] = {
    DpdService.CLASSIC: DpdServiceVariant(),
    DpdService.PREDICT: PredictVariant(),
    DpdService.RELAY: RelayVariant(),
    DpdService.RETURN: ReturnVariant(),
    DpdService.RELAY_RETURN: RelayReturnVariant(),
}


def build_request_id(street: str, postal_code: str, city: str, country: str, date_from: str) -> str:
    """Deterministic PUDO request id (deduplication key, not a secret)"""
    source = f"{street}{postal_code}{city}{country}{date_from}"
    return hashlib.md5(source.encode("utf-8")).hexdigest()[:REQUEST_ID_LENGTH]


def transform_item_to_relay_point(item: PudoItem, country_code: str) -> RelayPoint:
    """
    Transform a PUDO item into a relay point.

    Consecutive opening hours of the same day are merged into one OpeningHour.
    """
    complement = (item.address2 or "").strip()
    supplement = (item.address3 or "").strip()

    point = RelayPoint(
        street=item.address1.strip(),
        postal_code=item.zip_code,
        city=item.city,
        country_code=country_code,
        company=item.name,
        complement=complement or None,
        supplement=supplement or None,
        number=item.id,
        platform_name=PLATFORM_NAME,
        distance=item.distance,
        latitude=item.latitude,
        longitude=item.longitude,
    )

    current = None
    for opening_hour in item.opening_hours:
        if current is None or current.day != opening_hour.day:
            current = OpeningHour(day=opening_hour.day)
            point.add_opening_hour(current)

        current.add_ranges(opening_hour.from_time, opening_hour.to_time)

    return point


def _assert_single_return(shipment: ShipmentRecord) -> None:
    if shipment.has_parcels():
        raise PreconditionException("Expected shipment without parcel.", details={"number": shipment.number})
    if not shipment.is_return:
        raise PreconditionException("Expected return shipment.", details={"number": shipment.number})


def _format_pick_date(value: Any) -> str:
    if not value:
        return format_date()
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError as e:
            raise PreconditionException(f"Invalid pick date '{value}'.", details={"pick_date": value}) from e
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    raise PreconditionException(f"Invalid pick date '{value}'.", details={"pick_date": str(value)})


def _unsupported(
    gateway: "DpdGateway",
    shipment: ShipmentRecord,
    reason: str,
    throw: bool,
    error_code: ErrorCode = ErrorCode.UNSUPPORTED_SHIPMENT
) -> bool:
    if not throw:
        return False

    details = {"number": shipment.number, "gateway": gateway.get_name(), "reason": error_code.value}
    raise UnsupportedShipmentException(reason, details)
