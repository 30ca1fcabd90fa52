"""
Test per la normalizzazione dei tracking number DPD
"""
import pytest

from dpd_gateway.services.shipments.dpd_tracking import (
    build_prove_url,
    build_track_number,
    build_track_url,
)


@pytest.mark.unit
class TestBuildTrackNumber:

    @pytest.mark.parametrize("number", ["25007712345678", "ABCDEFGHIJKLMN"])
    def test_full_number_is_unchanged(self, number):
        assert build_track_number(number, "250", "077") == number

    def test_twelve_chars_get_country_code(self):
        assert build_track_number("077123456789", "250", "077") == "250077123456789"

    @pytest.mark.parametrize("number", ["12345", "1234567890", "1234567890123", "123456789012345"])
    def test_other_lengths_get_country_and_center(self, number):
        assert build_track_number(number, "250", "077") == f"250077{number}"


@pytest.mark.unit
class TestTrackingUrls:

    def test_track_url(self):
        assert build_track_url("077123456789", "250", "077") == "https://trace.dpd.fr/fr/trace/250077123456789"

    def test_prove_url(self):
        assert build_prove_url("25007712345678", "250", "077") == "https://trace.dpd.fr/preuvelivraison_25007712345678"
