"""
DPD tracking numbers and public tracking URLs.

EPrint replies carry shortened parcel numbers: the traceable number is rebuilt
from the configured country code and center (depot) number depending on the
length of what the carrier returned.
"""

TRACK_URL = "https://trace.dpd.fr/fr/trace/%s"
PROVE_URL = "https://trace.dpd.fr/preuvelivraison_%s"

FULL_NUMBER_LENGTH = 14
COUNTRY_LESS_NUMBER_LENGTH = 12


def build_track_number(number: str, country_code: str, center_number: str) -> str:
    """Return the full traceable number of a carrier parcel number"""
    if len(number) == FULL_NUMBER_LENGTH:
        return number

    if len(number) == COUNTRY_LESS_NUMBER_LENGTH:
        return f"{country_code}{number}"

    return f"{country_code}{center_number}{number}"


def build_track_url(number: str, country_code: str, center_number: str) -> str:
    return TRACK_URL % build_track_number(number, country_code, center_number)


def build_prove_url(number: str, country_code: str, center_number: str) -> str:
    return PROVE_URL % build_track_number(number, country_code, center_number)
