"""
Unit tests for phone number normalization
"""
import pytest

from kamioun.core.phone import normalize_phone


class TestNormalizePhone:
    @pytest.mark.parametrize("raw", ["20123456", "20 123 456", "+216 20 123 456", "0021620123456"])
    def test_local_and_international_formats_give_e164(self, raw):
        assert normalize_phone(raw) == "+21620123456"

    @pytest.mark.parametrize("raw", ["", None, "abc", "123", "+216 00 000 000"])
    def test_invalid_numbers_give_none(self, raw):
        assert normalize_phone(raw) is None

    def test_explicit_region(self):
        assert normalize_phone("06 12 34 56 78", region="FR") == "+33612345678"
