"""
Unit tests for validation.rules module.

Each rule returns ``None`` on success or a message fragment on failure.
"""

from datetime import UTC, datetime

import pytest

from smarthub.models import ModelType
from smarthub.validation import rules


class TestStringRules:
    """check_no_null, check_required_length, check_optional_length."""

    def test_no_null_rejects_non_string(self):
        assert rules.check_no_null(5) == "must be a string, got int"

    def test_required_length_ok(self):
        assert rules.check_required_length("ab", min_length=2, max_length=3) is None

    def test_optional_length_allows_empty(self):
        assert rules.check_optional_length("", max_length=5) is None

    def test_optional_length_too_long(self):
        assert rules.check_optional_length("abcdef", max_length=5) == "must be at most 5 characters"

    def test_length_counts_characters(self):
        assert rules.check_required_length("ééé", max_length=3) is None


class TestFormatRules:
    """check_alphanumeric, check_starts_with."""

    @pytest.mark.parametrize("value", ["", "T1000", "abc"])
    def test_alphanumeric_ok(self, value):
        assert rules.check_alphanumeric(value) is None

    @pytest.mark.parametrize("value", ["T-1000", "a b", "ñ1"])
    def test_alphanumeric_rejected(self, value):
        assert rules.check_alphanumeric(value) == "must contain only letters and digits"

    def test_starts_with(self):
        assert rules.check_starts_with("/temp", "/") is None
        assert rules.check_starts_with("temp", "/") == "must start with '/'"


class TestEnumRule:
    """check_enum."""

    def test_member_ok(self):
        assert rules.check_enum(ModelType.SERVICE, ModelType) is None

    def test_plain_value_ok(self):
        assert rules.check_enum("device", ModelType) is None

    def test_unknown(self):
        assert rules.check_enum("DEVICE", ModelType) == "must be one of device, service"


class TestValueMapRule:
    """check_value_map."""

    def test_nested_values_allowed(self):
        assert rules.check_value_map({"a": {"b": [1, 2.5, None, "x"]}}) is None

    def test_null_byte_key(self):
        assert rules.check_value_map({"a\x00": 1}) == "keys must not contain null bytes"

    @pytest.mark.parametrize(
        ("value", "message"),
        [
            ({"k": float("nan")}, "value at 'k' must be a finite number"),
            ({"k": float("inf")}, "value at 'k' must be a finite number"),
            ({"a": {"b": [1, float("-inf")]}}, "value at 'a.b[1]' must be a finite number"),
            ({"k": "a\x00b"}, "value at 'k' must not contain null bytes"),
            ({"a": ["ok", "x\x00"]}, "value at 'a[1]' must not contain null bytes"),
            ({"a": {"b\x00": 1}}, "keys under 'a' must not contain null bytes"),
            ({"a": {1: 1}}, "keys under 'a' must be strings"),
            ({"a": b"raw"}, "value at 'a' has unsupported type bytes"),
            ({"a": {"b": {1, 2}}}, "value at 'a.b' has unsupported type set"),
        ],
    )
    def test_nested_values_rejected(self, value, message):
        assert rules.check_value_map(value) == message

    def test_first_problem_reported(self):
        value = {"a": float("nan"), "b": "x\x00"}
        assert rules.check_value_map(value) == "value at 'a' must be a finite number"


class TestTimestampRule:
    """check_timestamp."""

    def test_aware_ok(self):
        assert rules.check_timestamp(datetime.now(UTC)) is None

    def test_not_datetime(self):
        assert rules.check_timestamp("2024-01-01") == "must be a datetime, got str"
