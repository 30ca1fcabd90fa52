"""
Shipment records handled by the gateway.

A record is either a whole shipment or one parcel of a multi-parcel shipment
(exactly one nesting level). The gateway only mutates tracking numbers, labels
and the state; everything else is owned by the surrounding order system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from dpd_gateway.core.exceptions import ConsistencyException, PreconditionException
from dpd_gateway.models.address import RelayPoint, Sale


class ShipmentState(str, Enum):
    NEW = "new"
    PENDING = "pending"
    SHIPPED = "shipped"
    CANCELED = "canceled"
    COMPLETED = "completed"


class LabelType(str, Enum):
    SHIPMENT = "shipment"
    RETURN = "return"
    PROOF = "proof"
    SUMMARY = "summary"


class LabelFormat(str, Enum):
    PNG = "image/png"
    PDF = "application/pdf"
    ZPL = "application/zpl"
    EPL = "application/epl"


class LabelSize(str, Enum):
    A4 = "A4"
    A5 = "A5"
    A6 = "A6"


@dataclass
class Label:
    type: LabelType
    format: LabelFormat
    size: LabelSize
    content: bytes = b""


@dataclass
class ShipmentRecord:
    number: str
    id: Optional[int] = None
    tracking_number: Optional[str] = None
    weight: Optional[Decimal] = None
    valorization: Optional[Decimal] = None
    state: ShipmentState = ShipmentState.NEW
    is_return: bool = False
    parcels: List["ShipmentRecord"] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)
    gateway_data: Dict[str, Any] = field(default_factory=dict)
    relay_point: Optional[RelayPoint] = None
    sale: Optional[Sale] = None
    # Owning shipment, set on parcels only
    shipment: Optional["ShipmentRecord"] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        for parcel in self.parcels:
            self._adopt(parcel)

    def _adopt(self, parcel: "ShipmentRecord") -> None:
        if parcel.parcels:
            raise PreconditionException("Parcels can't have parcels.")
        parcel.shipment = self

    @property
    def is_parcel(self) -> bool:
        return self.shipment is not None

    def get_owner(self) -> "ShipmentRecord":
        """Returns the whole shipment this record belongs to"""
        return self.shipment if self.shipment is not None else self

    def get_sale(self) -> Optional[Sale]:
        return self.get_owner().sale

    def has_parcels(self) -> bool:
        return len(self.parcels) > 0

    def add_parcel(self, parcel: "ShipmentRecord") -> "ShipmentRecord":
        self._adopt(parcel)
        self.parcels.append(parcel)
        return self

    def has_tracking_number(self) -> bool:
        """Whether this record (or every one of its parcels) has a tracking number"""
        if self.has_parcels():
            return all(p.has_tracking_number() for p in self.parcels)

        return bool(self.tracking_number)

    def assign_tracking_number(self, number: str) -> None:
        """Sets the carrier tracking number, which can't change once assigned"""
        number = str(number)
        if self.tracking_number and self.tracking_number != number:
            raise ConsistencyException(
                f"Record {self.number} already has tracking number {self.tracking_number}.",
                details={"current": self.tracking_number, "received": number}
            )
        self.tracking_number = number

    def has_labels(self) -> bool:
        return len(self.labels) > 0

    def get_label(self, label_type: LabelType) -> Optional[Label]:
        for label in self.labels:
            if label.type == label_type:
                return label
        return None

    def add_label(self, label: Label) -> "ShipmentRecord":
        if self.get_label(label.type) is not None:
            raise ConsistencyException(
                f"Record {self.number} already has a '{label.type.value}' label."
            )
        self.labels.append(label)
        return self

    def get_labels(self, types: Optional[Iterable[LabelType]] = None) -> List[Label]:
        if types is None:
            return list(self.labels)
        wanted = set(types)
        return [label for label in self.labels if label.type in wanted]
