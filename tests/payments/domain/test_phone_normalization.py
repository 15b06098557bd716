"""Tests for mobile-money phone normalization."""

import pytest
from payments.phone import COUNTRY_CODE, is_valid_phone, normalize_phone


class TestNormalizePhone:
    def test_trunk_prefix_replaced_with_country_code(self):
        assert normalize_phone("0712345678") == "255712345678"

    def test_bare_subscriber_number_gets_country_code(self):
        assert normalize_phone("712345678") == "255712345678"

    def test_country_coded_number_left_as_is(self):
        assert normalize_phone("255712345678") == "255712345678"

    def test_all_local_forms_agree(self):
        assert normalize_phone("0712345678") == normalize_phone("712345678") == normalize_phone("255712345678")

    def test_non_digits_are_stripped(self):
        assert normalize_phone("+255 712-345 678") == "255712345678"
        assert normalize_phone("(0712) 345 678") == "255712345678"

    @pytest.mark.parametrize(
        "raw",
        ["0712345678", "712345678", "255712345678", "+255 712 345 678", "0", "12", "abc 07"],
    )
    def test_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once

    def test_result_always_starts_with_country_code(self):
        assert normalize_phone("999").startswith(COUNTRY_CODE)

    def test_none_and_empty_are_tolerated(self):
        assert normalize_phone("") == COUNTRY_CODE
        assert normalize_phone(None) == COUNTRY_CODE


class TestIsValidPhone:
    def test_full_local_number_is_valid(self):
        assert is_valid_phone("0712345678") is True

    def test_short_number_is_invalid(self):
        assert is_valid_phone("07123") is False

    def test_empty_is_invalid(self):
        assert is_valid_phone("") is False
