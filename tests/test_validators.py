"""Tests for the primitive validators."""

import math
from collections import OrderedDict
from datetime import datetime, timedelta, timezone

import pytest

from typed_models.exceptions import ValidationFailure
from typed_models.types import PRIMITIVE_TYPE_NAMES


class TestInteger:
    """Tests for `int` / `integer`."""

    @pytest.mark.parametrize("name", ["int", "integer"])
    def test_valid(self, type_registry, name):
        for v in [-1, 0, 2, 100]:
            assert type_registry.validate(name, v) == v

    def test_coercion(self, type_registry):
        assert type_registry.validate("int", "42") == 42
        assert isinstance(type_registry.validate("int", "42"), int)
        assert type_registry.validate("int", " -7 ") == -7
        assert type_registry.validate("int", 3.0) == 3
        assert isinstance(type_registry.validate("int", 3.0), int)

    def test_infinity(self, type_registry):
        assert type_registry.validate("int", math.inf) == math.inf
        assert type_registry.validate("int", -math.inf) == -math.inf
        assert type_registry.validate("int", "Infinity") == math.inf

    @pytest.mark.parametrize("value", [False, True, 0.1, 123.01, "", "abc", "1.5", {}, [], math.nan, object()])
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate("int", value)
        with pytest.raises(ValidationFailure):
            type_registry.validate("integer", value)

    def test_large_ints(self, type_registry):
        big = 10**400

        assert type_registry.validate("int", big) == big
        assert type_registry.validate("int", -big) == -big
        assert type_registry.validate("int", str(big)) == math.inf

    def test_failure_carries_value(self, type_registry):
        with pytest.raises(ValidationFailure, match="Invalid integer") as exc_info:
            type_registry.validate("int", 0.5)

        assert exc_info.value.type_name == "integer"
        assert exc_info.value.value == 0.5


class TestNumber:
    """Tests for `float` / `number`."""

    @pytest.mark.parametrize("name", ["float", "number"])
    def test_valid(self, type_registry, name):
        for v in [-1, -1.01, 0.1, 1, 2.345, 100, 100.000000001]:
            assert type_registry.validate(name, v) == v

    def test_coercion(self, type_registry):
        assert type_registry.validate("number", "2.5") == 2.5
        assert type_registry.validate("number", "-10") == -10.0

    def test_large_ints(self, type_registry):
        assert type_registry.validate("number", 10**400) == 10**400

    def test_python_class(self, type_registry):
        assert type_registry.validate(float, 1.5) == 1.5

    @pytest.mark.parametrize("value", [False, True, "", "abc", {}, [], math.nan, lambda: None])
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate("number", value)


class TestString:
    """Tests for `string` / `text`."""

    @pytest.mark.parametrize("name", ["string", "text", "String"])
    def test_valid(self, type_registry, name):
        for v in ["", "foo"]:
            assert type_registry.validate(name, v) == v

    def test_numbers_are_stringified(self, type_registry):
        for v in [-1234, -123.456, 123.456, 1234]:
            assert type_registry.validate("text", v) == str(v)

    def test_integral_floats_drop_fraction(self, type_registry):
        assert type_registry.validate("text", 2.0) == "2"
        assert type_registry.validate("text", -10.0) == "-10"
        assert type_registry.validate("text", 0.5) == "0.5"
        assert type_registry.validate("text", math.inf) == "Infinity"
        assert type_registry.validate("text", -math.inf) == "-Infinity"

    @pytest.mark.parametrize("value", [False, True, {}, [], lambda: None, object()])
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate(str, value)


class TestBoolean:
    """Tests for `bool` / `boolean`."""

    @pytest.mark.parametrize("name", ["bool", "boolean"])
    def test_valid(self, type_registry, name):
        for v in [-1, 0, 1, False, True]:
            assert type_registry.validate(name, v) is bool(v)

    def test_strings(self, type_registry):
        assert type_registry.validate("bool", "true") is True
        assert type_registry.validate("bool", "TRUE") is True
        assert type_registry.validate("bool", "1") is True
        assert type_registry.validate("bool", "False") is False
        assert type_registry.validate("bool", "0") is False

    @pytest.mark.parametrize("value", ["", "yes", "2", {}, [], lambda: None])
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate("boolean", value)


class TestDate:
    """Tests for `date`."""

    def test_datetime_passes(self, type_registry):
        now = datetime.now()
        assert type_registry.validate("date", now) is now

    def test_epoch_millis(self, type_registry):
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)

        assert type_registry.validate("date", 0) == epoch
        assert type_registry.validate("date", 1500) == epoch + timedelta(milliseconds=1500)
        assert type_registry.validate("date", "1000") == epoch + timedelta(seconds=1)

    def test_iso_strings(self, type_registry):
        assert type_registry.validate("date", "2020-01-02T03:04:05Z") == datetime(
            2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc
        )
        assert type_registry.validate("date", "2020-01-02") == datetime(2020, 1, 2)

    def test_aliases(self, type_registry):
        assert type_registry.validate("timestamp", 0) == type_registry.validate("datetime", 0)

    @pytest.mark.parametrize("value", ["not a date", "", True, {}, [], math.nan, math.inf])
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate("date", value)


class TestArray:
    """Tests for `array`."""

    def test_valid(self, type_registry):
        for v in [[], [1, 2], [None], [False], [True]]:
            assert type_registry.validate("array", v) is v
            assert type_registry.validate(list, v) is v

    @pytest.mark.parametrize("value", [False, True, 0, 0.1, 1, "", "1", {}, (1, 2), lambda: None])
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate("array", value)


class TestObject:
    """Tests for `object`."""

    def test_valid(self, type_registry):
        for v in [{}, {"foo": "bar"}, dict()]:
            assert type_registry.validate("object", v) is v
            assert type_registry.validate(dict, v) is v

    @pytest.mark.parametrize(
        "value", [False, True, 0, 0.1, "", "1", [], lambda: None, object(), OrderedDict()]
    )
    def test_invalid(self, type_registry, value):
        with pytest.raises(ValidationFailure):
            type_registry.validate("object", value)


class TestIdempotence:
    """Validating an already validated value returns the same value."""

    SAMPLES = {
        "integer": [-1, 0, "42", 3.0, math.inf],
        "number": [-1.5, "2.5", 7],
        "string": ["", "foo", 12, 1.5],
        "boolean": [True, 0, "true", "0"],
        "date": [0, "1000", "2020-01-02T03:04:05Z", datetime(2020, 1, 1)],
        "array": [[], [1, "a"]],
        "object": [{}, {"a": 1}],
    }

    def test_idempotent(self, type_registry):
        for name, values in self.SAMPLES.items():
            for value in values:
                once = type_registry.validate(name, value)
                assert type_registry.validate(name, once) == once

    def test_aliases_share_validators(self):
        assert PRIMITIVE_TYPE_NAMES["int"].validator is PRIMITIVE_TYPE_NAMES["integer"].validator
