"""
Address, sale and relay point models owned by the caller.

The gateway only reads them, except relay points which it builds from PUDO items.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from phonenumbers import PhoneNumber

Phone = Union[PhoneNumber, str]


@dataclass
class Customer:
    email: Optional[str] = None
    mobile: Optional[Phone] = None


@dataclass
class Sale:
    """Owning order of a shipment (identity, contact and reference data)"""
    number: str
    email: Optional[str] = None
    company: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    customer: Optional[Customer] = None


@dataclass
class Address:
    street: str
    postal_code: str
    city: str
    country_code: str
    company: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[Phone] = None
    mobile: Optional[Phone] = None
    complement: Optional[str] = None
    supplement: Optional[str] = None
    extra: Optional[str] = None
    digicode1: Optional[str] = None
    digicode2: Optional[str] = None
    intercom: Optional[str] = None
    # Set for sale addresses: used as a name fallback
    sale: Optional[Sale] = field(default=None, repr=False, compare=False)


@dataclass
class OpeningHour:
    day: int
    ranges: List[Tuple[str, str]] = field(default_factory=list)

    def add_ranges(self, from_time: str, to_time: str) -> "OpeningHour":
        self.ranges.append((from_time, to_time))
        return self


@dataclass
class RelayPoint(Address):
    number: str = ""
    platform_name: Optional[str] = None
    distance: Optional[int] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    opening_hours: List[OpeningHour] = field(default_factory=list)

    def add_opening_hour(self, opening_hour: OpeningHour) -> "RelayPoint":
        self.opening_hours.append(opening_hour)
        return self
