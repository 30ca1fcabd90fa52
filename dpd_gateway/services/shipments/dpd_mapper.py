from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
import logging

from dpd_gateway.core.exceptions import ExceptionFactory, PreconditionException
from dpd_gateway.models.shipment import ShipmentRecord
from dpd_gateway.schemas.dpd_configuration_schema import GatewayConfig
from dpd_gateway.schemas.dpd_shipment_schema import (
    Contact,
    ContactType,
    Customer,
    ExtraInsurance,
    InsuranceType,
    LabelTypeDirective,
    MultiServices,
    MultiShipmentRequest,
    Parcel,
    SlaveRequest,
    SlaveServices,
    StdServices,
    StdShipmentLabelRequest,
)
from dpd_gateway.services.interfaces.address_resolver_interface import IAddressResolver
from dpd_gateway.services.interfaces.shipment_calculator_interface import IShipmentCalculator
from dpd_gateway.services.shipments.dpd_address_mapper import DpdAddressMapper

logger = logging.getLogger(__name__)

# EPrint accepts 'd/m/Y' or 'd.m.Y'
DATE_FORMAT = "%d/%m/%Y"

TWO_PLACES = Decimal("0.01")


def format_decimal(value: Union[Decimal, int, float, str]) -> str:
    """Weights (kg) and amounts are sent with two decimals"""
    return str(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_date(value: Optional[datetime] = None) -> str:
    return (value or datetime.now()).strftime(DATE_FORMAT)


class DpdMapper:
    """
    Mapper for converting shipment records to EPrint requests

    EPrint requires:
    1. A single shipment request (labels returned) for shipments without parcels
    2. A multi shipment request (one slave per parcel) otherwise
    """

    def __init__(
        self,
        config: GatewayConfig,
        address_resolver: IAddressResolver,
        calculator: IShipmentCalculator,
        address_mapper: Optional[DpdAddressMapper] = None
    ):
        self.config = config
        self.address_resolver = address_resolver
        self.calculator = calculator
        self.address_mapper = address_mapper or DpdAddressMapper()

    def build_customer(self) -> Customer:
        return Customer(
            number=self.config.customer_number,
            countrycode=self.config.country_code,
            centernumber=self.config.center_number,
        )

    def build_customer_identity(self) -> dict:
        """Customer fields shared by the shipment / collection requests"""
        return {
            "customer_centernumber": self.config.center_number,
            "customer_countrycode": self.config.country_code,
            "customer_number": self.config.customer_number,
        }

    def build_label_type(self) -> LabelTypeDirective:
        return LabelTypeDirective(type=self.config.label_type)

    def build_contact(
        self,
        shipment: ShipmentRecord,
        contact_type: ContactType = ContactType.AUTOMATIC_MAIL
    ) -> Contact:
        """
        Build the receiver notification contact

        Args:
            shipment: Whole shipment
            contact_type: AutomaticMail by default, Predict for SMS notified deliveries

        Returns:
            Contact with the sale e-mail and, when available, the receiver mobile
        """
        sale = shipment.get_sale()
        receiver = self.address_resolver.resolve_receiver_address(shipment, True)

        sms = None
        if receiver.mobile is not None:
            sms = self.address_mapper.format_phone_number(receiver.mobile)

        return Contact(
            type=contact_type,
            email=sale.email if sale is not None else None,
            sms=sms,
        )

    def build_extra_insurance(self, record: ShipmentRecord) -> ExtraInsurance:
        """
        Build the insurance block of a shipment or a parcel.

        A whole shipment without valorization falls back to its goods value,
        a parcel must carry its own valorization.
        """
        value = record.valorization
        if value is None or value <= 0:
            if record.is_parcel:
                raise ExceptionFactory.valorization_missing(record.number)
            value = self.calculator.calculate_goods_value(record)

        return ExtraInsurance(
            type=InsuranceType.BY_SHIPMENTS,
            value=format_decimal(value),
        )

    def build_parcel(self, record: ShipmentRecord) -> Parcel:
        if not record.tracking_number:
            raise ExceptionFactory.tracking_number_missing(record.number)

        return Parcel(
            parcelnumber=record.tracking_number,
            countrycode=self.config.country_code,
            centernumber=self.config.center_number,
        )

    def resolve_weight(self, shipment: ShipmentRecord) -> Decimal:
        weight = shipment.weight
        if weight is None or weight <= 0:
            weight = self.calculator.calculate_weight(shipment)
        return weight

    def build_single_request(
        self,
        shipment: ShipmentRecord,
        contact_type: ContactType = ContactType.AUTOMATIC_MAIL
    ) -> StdShipmentLabelRequest:
        """
        Build the CreateShipmentWithLabelsBc request of a shipment without parcels

        Args:
            shipment: Whole shipment without parcels
            contact_type: Receiver notification channel

        Returns:
            StdShipmentLabelRequest
        """
        if shipment.has_parcels():
            raise PreconditionException(
                "Expected shipment without parcel.",
                details={"number": shipment.number}
            )

        receiver = self.address_resolver.resolve_receiver_address(shipment, True)
        shipper = self.address_resolver.resolve_sender_address(shipment, True)

        services = StdServices(contact=self.build_contact(shipment, contact_type))
        if self._insurance_enabled(shipment):
            services.extra_insurance = self.build_extra_insurance(shipment)

        sale = shipment.get_sale()

        request = StdShipmentLabelRequest(
            **self.build_customer_identity(),
            label_type=self.build_label_type(),
            receiveraddress=self.address_mapper.build_address(receiver),
            receiverinfo=self.address_mapper.build_address_info(receiver),
            shipperaddress=self.address_mapper.build_address(shipper),
            weight=format_decimal(self.resolve_weight(shipment)),
            services=services,
            shippingdate=format_date(),
            referencenumber=shipment.number,
            reference2=sale.number if sale is not None else None,
        )

        logger.debug(f"DPD single shipment request for {shipment.number}: {request.model_dump(by_alias=True, exclude_none=True)}")

        return request

    def build_multi_request(
        self,
        shipment: ShipmentRecord,
        contact_type: ContactType = ContactType.AUTOMATIC_MAIL
    ) -> MultiShipmentRequest:
        """
        Build the CreateMultiShipmentBc request: one slave per parcel, in parcels order

        Args:
            shipment: Whole shipment with parcels
            contact_type: Receiver notification channel

        Returns:
            MultiShipmentRequest
        """
        if not shipment.has_parcels():
            raise PreconditionException(
                "Expected shipment with parcels.",
                details={"number": shipment.number}
            )

        receiver = self.address_resolver.resolve_receiver_address(shipment)
        shipper = self.address_resolver.resolve_sender_address(shipment)

        request = MultiShipmentRequest(
            **self.build_customer_identity(),
            receiveraddress=self.address_mapper.build_address(receiver),
            receiverinfo=self.address_mapper.build_address_info(receiver),
            shipperaddress=self.address_mapper.build_address(shipper),
            shippingdate=format_date(),
            services=MultiServices(contact=self.build_contact(shipment, contact_type)),
        )

        add_insurance = self._insurance_enabled(shipment)
        sale = shipment.get_sale()

        for index, parcel in enumerate(shipment.parcels, start=1):
            slave = SlaveRequest(
                weight=format_decimal(parcel.weight or 0),
                referencenumber=f"{shipment.number}_{index}",
                reference2=sale.number if sale is not None else None,
                reference3=f"parcel#{parcel.id}",
            )

            if add_insurance:
                slave.services = SlaveServices(extra_insurance=self.build_extra_insurance(parcel))

            request.add_slave(slave)

        logger.debug(f"DPD multi shipment request for {shipment.number}: {request.model_dump(by_alias=True, exclude_none=True)}")

        return request

    @staticmethod
    def _insurance_enabled(shipment: ShipmentRecord) -> bool:
        return bool(shipment.gateway_data.get("insurance"))
