from typing import Optional
import logging

import phonenumbers
from phonenumbers import PhoneNumber, PhoneNumberFormat

from dpd_gateway.models.address import Address, Phone
from dpd_gateway.schemas.dpd_shipment_schema import AddressInfo, CarrierAddress

logger = logging.getLogger(__name__)


# Countries served by DPD Europe; any other country is sent as intercontinental
COUNTRY_CODES = frozenset({
    "AD",  # Andorra
    "AT",  # Austria
    "BE",  # Belgium
    "BA",  # Bosnia & Herzegovina
    "BG",  # Bulgaria
    "HR",  # Croatia
    "DK",  # Denmark
    "ES",  # Spain
    "EE",  # Estonia
    "FI",  # Finland
    "FR",  # France
    "GB",  # United Kingdom
    "GR",  # Greece
    "GG",  # Guernsey
    "HU",  # Hungary
    "IM",  # Isle of Man
    "IE",  # Ireland
    "IT",  # Italy
    "JE",  # Jersey
    "LV",  # Latvia
    "LI",  # Liechtenstein
    "LT",  # Lithuania
    "LU",  # Luxembourg
    "NO",  # Norway
    "NL",  # Netherlands
    "PL",  # Poland
    "PT",  # Portugal
    "CZ",  # Czech Republic
    "RO",  # Romania
    "RS",  # Serbia
    "SK",  # Slovakia
    "SI",  # Slovenia
    "SE",  # Sweden
    "CH",  # Switzerland
})

INTERCONTINENTAL = "INT"


class DpdAddressMapper:
    """
    Mapper for converting domain addresses to EPrint address records
    """

    def build_address(self, address: Address) -> CarrierAddress:
        """
        Build the EPrint address of a receiver / shipper

        Args:
            address: Resolved domain address

        Returns:
            CarrierAddress with name, allow-listed country, space-less postal
            code and (optional) national formatted phone number
        """
        country = address.country_code
        if country not in COUNTRY_CODES:
            country = INTERCONTINENTAL

        phone = address.phone if address.phone is not None else address.mobile

        return CarrierAddress(
            name=self._resolve_name(address),
            country_prefix=country,
            zip_code=address.postal_code.replace(" ", ""),
            city=address.city,
            street=address.street,
            phone_number=self.format_phone_number(phone) if phone is not None else None,
        )

    def build_address_info(self, address: Address) -> Optional[AddressInfo]:
        """
        Build the receiver optional information.

        Returns None when none of the optional fields is set.
        """
        values = {}

        if address.first_name and address.last_name and address.company:
            values["name2"] = f"{address.first_name} {address.last_name}"
        if address.complement:
            values["vinfo1"] = address.complement
        if address.supplement:
            values["vinfo2"] = address.supplement
        if address.extra:
            values["name3"] = address.extra
        if address.digicode1:
            values["digicode1"] = address.digicode1
        if address.digicode2:
            values["digicode2"] = address.digicode2
        if address.intercom:
            values["intercomid"] = address.intercom

        if not values:
            return None

        return AddressInfo(**values)

    def format_phone_number(self, number: Phone) -> str:
        """National format for parsed numbers, plain text otherwise"""
        if isinstance(number, PhoneNumber):
            return phonenumbers.format_number(number, PhoneNumberFormat.NATIONAL)

        return str(number)

    def _resolve_name(self, address: Address) -> Optional[str]:
        if address.company:
            return address.company

        if address.first_name and address.last_name:
            return f"{address.first_name} {address.last_name}"

        sale = address.sale
        if sale is not None:
            if sale.company:
                return sale.company
            if sale.first_name and sale.last_name:
                return f"{sale.first_name} {sale.last_name}"

        logger.warning(f"No name could be resolved for address {address.street}, {address.city}")
        return None
