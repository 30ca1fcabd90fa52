from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dpd_gateway.models.address import RelayPoint


class PudoModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GetPudoListRequest(PudoModel):
    """GetPudoList request"""
    address: str
    zip_code: str = Field(..., alias="zipCode")
    city: str
    countrycode: str
    date_from: str
    request_id: str = Field(..., alias="requestID", max_length=30)


class GetPudoDetailsRequest(PudoModel):
    """GetPudoDetails request"""
    pudo_id: str


class PudoOpeningHour(PudoModel):
    day: int = Field(..., alias="DAY_ID")
    from_time: str = Field(..., alias="START_TM")
    to_time: str = Field(..., alias="END_TM")


class PudoItem(PudoModel):
    id: str = Field(..., alias="PUDO_ID")
    name: str = Field(..., alias="NAME")
    address1: str = Field("", alias="ADDRESS1")
    address2: Optional[str] = Field("", alias="ADDRESS2")
    address3: Optional[str] = Field("", alias="ADDRESS3")
    zip_code: str = Field(..., alias="ZIPCODE")
    city: str = Field(..., alias="CITY")
    distance: Optional[int] = Field(None, alias="DISTANCE")
    longitude: Optional[Decimal] = Field(None, alias="LONGITUDE")
    latitude: Optional[Decimal] = Field(None, alias="LATITUDE")
    opening_hours: List[PudoOpeningHour] = Field(default_factory=list, alias="OPENING_HOURS_ITEMS")


class GetPudoListResponse(PudoModel):
    items: List[PudoItem] = Field(default_factory=list)


class GetPudoDetailsResponse(PudoModel):
    item: PudoItem


@dataclass
class ListRelayPointResponse:
    """Relay points found around an address"""
    relay_points: List[RelayPoint] = field(default_factory=list)

    def add_relay_point(self, relay_point: RelayPoint) -> "ListRelayPointResponse":
        self.relay_points.append(relay_point)
        return self


@dataclass
class GetRelayPointResponse:
    relay_point: Optional[RelayPoint] = None
