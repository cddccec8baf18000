"""Tests for phone normalization."""
import pytest

from guestlist.services.phone import normalize_phone


class TestNormalizePhone:

    @pytest.mark.parametrize("raw", [
        "050-123-4567",
        "0501234567",
        "050 123 4567",
        "(050) 123-4567",
        "972501234567",
        "+972-50-123-4567",
    ])
    def test_local_and_international_forms_converge(self, raw):
        assert normalize_phone(raw) == "+972501234567"

    def test_empty_input_is_none(self):
        assert normalize_phone(None) is None
        assert normalize_phone("") is None

    def test_no_digits_is_none(self):
        assert normalize_phone("---") is None

    def test_foreign_number_keeps_its_digits(self):
        assert normalize_phone("+1 (212) 555-0100") == "+12125550100"

    def test_malformed_number_is_not_rejected(self):
        """Digit count is not validated."""
        assert normalize_phone("05012") == "+9725012"

    def test_explicit_country_code(self):
        assert normalize_phone("0201234567", country_code="44") == "+44201234567"
