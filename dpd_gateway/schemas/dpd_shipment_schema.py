import base64
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dpd_gateway.schemas.dpd_configuration_schema import LabelTypeCode


class ContactType(str, Enum):
    NO = "No"
    PREDICT = "Predict"
    AUTOMATIC_SMS = "AutomaticSMS"
    AUTOMATIC_MAIL = "AutomaticMail"


class InsuranceType(str, Enum):
    BY_SHIPMENTS = "byShipments"
    BY_PARCELS = "byParcels"


class CarrierLabelType(str, Enum):
    """EPrint label kinds (replies may carry other values)"""
    EPRINT = "EPRINT"
    EPRINT_ATTACHMENT = "EPRINTATTACHMENT"
    REVERSE = "REVERSE"
    REVERSEBIC3 = "REVERSEBIC3"
    PROOF = "PROOF"
    PROOFBIC3 = "PROOFBIC3"
    BIC3 = "BIC3"


class EPrintModel(BaseModel):
    """Base of the EPrint contracts (python names, carrier aliases)"""
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Request building blocks
# ---------------------------------------------------------------------------

class CarrierAddress(EPrintModel):
    """EPrint Address"""
    name: Optional[str] = None
    country_prefix: str = Field(..., alias="countryPrefix")
    zip_code: str = Field(..., alias="zipCode")
    city: str
    street: str
    phone_number: Optional[str] = Field(None, alias="phoneNumber")


class AddressInfo(EPrintModel):
    """EPrint AddressInfo (receiver optional information)"""
    name2: Optional[str] = None
    vinfo1: Optional[str] = None
    vinfo2: Optional[str] = None
    name3: Optional[str] = None
    digicode1: Optional[str] = None
    digicode2: Optional[str] = None
    intercomid: Optional[str] = None


class Customer(EPrintModel):
    number: str
    countrycode: str
    centernumber: str


class LabelTypeDirective(EPrintModel):
    type: LabelTypeCode


class Contact(EPrintModel):
    type: ContactType = ContactType.AUTOMATIC_MAIL
    email: Optional[str] = None
    sms: Optional[str] = None


class ExtraInsurance(EPrintModel):
    type: InsuranceType = InsuranceType.BY_SHIPMENTS
    value: str


class ShopAddress(EPrintModel):
    shopid: str


class ParcelShop(EPrintModel):
    shopaddress: ShopAddress


class StdServices(EPrintModel):
    contact: Optional[Contact] = None
    extra_insurance: Optional[ExtraInsurance] = Field(None, alias="extraInsurance")
    parcelshop: Optional[ParcelShop] = None


class MultiServices(EPrintModel):
    contact: Optional[Contact] = None


class SlaveServices(EPrintModel):
    extra_insurance: Optional[ExtraInsurance] = Field(None, alias="extraInsurance")


class SlaveRequest(EPrintModel):
    weight: str
    referencenumber: Optional[str] = None
    reference2: Optional[str] = None
    reference3: Optional[str] = None
    services: Optional[SlaveServices] = None


class Parcel(EPrintModel):
    parcelnumber: str
    countrycode: str
    centernumber: str


class ContactCollectionRequest(EPrintModel):
    type: ContactType = ContactType.AUTOMATIC_MAIL
    email: Optional[str] = None
    shipper_email: Optional[str] = None
    shipper_mobil: Optional[str] = None


class CollectionRequestServices(EPrintModel):
    contact: Optional[ContactCollectionRequest] = None
    extra_insurance: Optional[ExtraInsurance] = Field(None, alias="extraInsurance")


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class CustomerIdentity(EPrintModel):
    customer_centernumber: str
    customer_countrycode: str
    customer_number: str


class StdShipmentLabelRequest(CustomerIdentity):
    """CreateShipmentWithLabelsBc request (single shipment)"""
    label_type: Optional[LabelTypeDirective] = Field(None, alias="labelType")
    receiveraddress: CarrierAddress
    receiverinfo: Optional[AddressInfo] = None
    shipperaddress: CarrierAddress
    weight: str
    services: Optional[StdServices] = None
    shippingdate: Optional[str] = None
    referencenumber: Optional[str] = None
    reference2: Optional[str] = None


class MultiShipmentRequest(CustomerIdentity):
    """CreateMultiShipmentBc request (one slave per parcel)"""
    receiveraddress: CarrierAddress
    receiverinfo: Optional[AddressInfo] = None
    shipperaddress: CarrierAddress
    shippingdate: Optional[str] = None
    services: Optional[MultiServices] = None
    slaves: List[SlaveRequest] = Field(default_factory=list)

    def add_slave(self, slave: SlaveRequest) -> "MultiShipmentRequest":
        self.slaves.append(slave)
        return self


class ReceiveLabelRequest(EPrintModel):
    """GetLabelBc request"""
    customer: Customer
    label_type: LabelTypeDirective = Field(..., alias="labelType")
    shipment_number: str = Field(..., alias="shipmentNumber")


class CollectionRequest(CustomerIdentity):
    """CreateCollectionRequestBc request (scheduled pickup)"""
    receiveraddress: CarrierAddress
    shipperaddress: CarrierAddress
    services: Optional[CollectionRequestServices] = None
    parcel_count: int = 1
    pick_date: str
    time_from: str
    time_to: str
    remark: str = ""
    pick_remark: str = ""
    delivery_remark: str = ""
    referencenumber: Optional[str] = None
    reference2: Optional[str] = None


class ReverseShipmentLabelRequest(CustomerIdentity):
    """CreateReverseInverseShipmentWithLabels request (no insurance support)"""
    label_type: Optional[LabelTypeDirective] = Field(None, alias="labelType")
    receiveraddress: CarrierAddress
    receiverinfo: Optional[AddressInfo] = None
    shipperaddress: CarrierAddress
    weight: str
    expire_offset: int = Field(15, ge=7)
    refasbarcode: bool = True
    shippingdate: Optional[str] = None
    referencenumber: Optional[str] = None


class TerminateCollectionRequest(EPrintModel):
    """TerminateCollectionRequestBc request"""
    parcel: Parcel
    customer: Customer


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class ShipmentNumber(EPrintModel):
    barcode_id: str = Field(..., alias="BarcodeId")

    @field_validator("barcode_id", mode="before")
    @classmethod
    def _barcode_as_str(cls, value):
        return str(value) if isinstance(value, int) else value


class ShipmentBc(EPrintModel):
    shipment: ShipmentNumber = Field(..., alias="Shipment")


class CarrierLabel(EPrintModel):
    type: str
    label: bytes

    @field_validator("label", mode="before")
    @classmethod
    def _decode_label(cls, value):
        # JSON replies carry the label binary base64 encoded
        if isinstance(value, str):
            return base64.b64decode(value)
        return value


class ShipmentWithLabelsResult(EPrintModel):
    shipments: List[ShipmentBc] = Field(default_factory=list)
    labels: List[CarrierLabel] = Field(default_factory=list)


class MultiShipmentResult(EPrintModel):
    shipments: List[ShipmentBc] = Field(default_factory=list)


class LabelResult(EPrintModel):
    labels: List[CarrierLabel] = Field(default_factory=list)


class CollectionRequestResult(EPrintModel):
    shipments: List[ShipmentBc] = Field(default_factory=list)


class ReverseShipment(EPrintModel):
    parcelnumber: str

    @field_validator("parcelnumber", mode="before")
    @classmethod
    def _parcelnumber_as_str(cls, value):
        return str(value) if isinstance(value, int) else value


class ReverseShipmentResult(EPrintModel):
    shipment: Optional[ReverseShipment] = None
    labels: List[CarrierLabel] = Field(default_factory=list)
