#!/usr/bin/env python3
"""
Tests for string conversion of option values.

Covers the default converters, enum and Literal handling, caller-registered
converters and the reporting of values that cannot be converted.
"""

import datetime
import decimal
import enum
import pathlib
from dataclasses import dataclass, field
from io import StringIO
from typing import Literal, Optional

import pytest

from dataclass_cmdline import ConversionError, ConverterRegistry, DataclassCommandLineParser


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Priority(enum.IntEnum):
    LOW = 1
    HIGH = 2


class Opaque:
    """A type with no registered converter."""


@dataclass
class TypedOptions:
    count: int = 0
    ratio: float = 0.0
    name: str = ""
    enabled: bool = False
    color: Color = Color.RED
    priority: Priority = Priority.LOW
    mode: Literal["fast", "slow"] = "fast"
    level: Literal[1, 2, 3] = 1
    path: pathlib.Path = pathlib.Path(".")
    amount: decimal.Decimal = decimal.Decimal("0")
    limit: Optional[int] = None
    numbers: list[int] = field(default_factory=list)
    opaque: Opaque = None


def parse(*args):
    options = TypedOptions()
    stream = StringIO()
    ok = DataclassCommandLineParser(options, prog="typed", stream=stream).parse(list(args))
    return ok, options, stream.getvalue()


class TestDefaultConverters:
    """Conversion of the built-in types."""

    @pytest.mark.parametrize(
        "arg,attribute,expected",
        [
            ("/count:42", "count", 42),
            ("/count:-7", "count", -7),
            ("/ratio:2.5", "ratio", 2.5),
            ("/ratio:1e3", "ratio", 1000.0),
            ("/name:hello world", "name", "hello world"),
            ("/name:", "name", ""),
            ("/enabled", "enabled", True),
            ("/enabled:True", "enabled", True),
            ("/enabled:1", "enabled", True),
            ("/enabled:0", "enabled", False),
            ("/path:/tmp/out", "path", pathlib.Path("/tmp/out")),
            ("/amount:12.50", "amount", decimal.Decimal("12.50")),
            ("/limit:10", "limit", 10),
        ],
    )
    def test_valid_values(self, arg, attribute, expected):
        ok, options, err = parse(arg)
        assert ok, err
        assert getattr(options, attribute) == expected

    @pytest.mark.parametrize(
        "arg,value,name",
        [
            ("/count:abc", "abc", "count"),
            ("/count:1.5", "1.5", "count"),
            ("/ratio:fast", "fast", "ratio"),
            ("/enabled:yes", "yes", "enabled"),
            ("/amount:lots", "lots", "amount"),
            ("/limit:none", "none", "limit"),
        ],
    )
    def test_invalid_values(self, arg, value, name):
        ok, _, err = parse(arg)
        assert not ok
        assert err.startswith(f"Invalid value '{value}' for option '{name}'\n")

    def test_list_elements_are_converted(self):
        ok, options, _ = parse("/numbers:1", "/numbers:20")
        assert ok
        assert options.numbers == [1, 20]

    def test_invalid_list_element_is_not_appended(self):
        ok, options, err = parse("/numbers:1", "/numbers:two")
        assert not ok
        assert "Invalid value 'two' for option 'numbers'" in err
        assert options.numbers == [1]


class TestEnumAndLiteral:
    """Conversion of enumerations and Literal choices."""

    @pytest.mark.parametrize("value", ["RED", "red", "Red"])
    def test_enum_by_name_or_value(self, value):
        ok, options, _ = parse(f"/color:{value}")
        assert ok
        assert options.color is Color.RED

    def test_int_enum_by_value(self):
        ok, options, _ = parse("/priority:2")
        assert ok
        assert options.priority is Priority.HIGH

    def test_unknown_enum_member(self):
        ok, _, err = parse("/color:blue")
        assert not ok
        assert err.startswith("Invalid value 'blue' for option 'color'")

    def test_literal_choices(self):
        ok, options, _ = parse("/mode:slow", "/level:3")
        assert ok
        assert options.mode == "slow"
        assert options.level == 3

    def test_literal_rejects_other_values(self):
        ok, _, err = parse("/mode:medium")
        assert not ok
        assert err.startswith("Invalid value 'medium' for option 'mode'")


class TestCustomConverters:
    """Caller-supplied converters."""

    def test_unregistered_type_is_an_invalid_value(self):
        ok, options, err = parse("/opaque:thing")
        assert not ok
        assert err.startswith("Invalid value 'thing' for option 'opaque'")
        assert options.opaque is None

    def test_converter_passed_to_parser(self):
        @dataclass
        class DateOptions:
            since: datetime.date = datetime.date(2000, 1, 1)

        options = DateOptions()
        parser = DataclassCommandLineParser(
            options, converters={datetime.date: datetime.date.fromisoformat}
        )
        assert parser.parse(["/since:2024-02-29"])
        assert options.since == datetime.date(2024, 2, 29)

    def test_failing_custom_converter_is_reported(self):
        @dataclass
        class DateOptions:
            since: datetime.date = datetime.date(2000, 1, 1)

        stream = StringIO()
        parser = DataclassCommandLineParser(
            DateOptions(),
            converters={datetime.date: datetime.date.fromisoformat},
            stream=stream,
        )
        assert not parser.parse(["/since:yesterday"])
        assert stream.getvalue().startswith(
            "Invalid value 'yesterday' for option 'since'\n"
        )

    def test_field_converter_metadata(self):
        @dataclass
        class UpperOptions:
            tags: list[str] = field(
                default_factory=list, metadata={"converter": str.upper}
            )

        options = UpperOptions()
        assert DataclassCommandLineParser(options).parse(["/tags:a", "/tags:Bc"])
        assert options.tags == ["A", "BC"]

    def test_any_converter_exception_is_an_invalid_value(self):
        table = {"low": 1, "high": 2}

        @dataclass
        class LookupOptions:
            level: int = field(default=1, metadata={"converter": lambda s: table[s]})

        options = LookupOptions()
        stream = StringIO()
        parser = DataclassCommandLineParser(options, stream=stream)

        assert not parser.parse(["/level:zzz"])
        assert stream.getvalue().startswith("Invalid value 'zzz' for option 'level'\n")
        assert options.level == 1

    def test_converter_exception_is_chained(self):
        registry = ConverterRegistry({complex: lambda s: {}[s]})
        with pytest.raises(ConversionError) as exc:
            registry.convert("x", complex)
        assert isinstance(exc.value.__cause__, KeyError)

    def test_register_replaces_default(self):
        registry = ConverterRegistry()
        registry.register(bool, lambda s: s == "on")
        assert registry.convert("on", bool) is True
        assert registry.convert("true", bool) is False

    def test_register_rejects_non_callable(self):
        with pytest.raises(TypeError):
            ConverterRegistry().register(int, "int")


class TestConverterRegistry:
    """Direct use of ConverterRegistry."""

    def test_optional_types_are_unwrapped(self):
        assert ConverterRegistry().convert("5", Optional[int]) == 5

    def test_missing_converter_raises(self):
        with pytest.raises(ConversionError, match="No converter"):
            ConverterRegistry().convert("x", Opaque)

    def test_lookup_unknown_type(self):
        assert ConverterRegistry().lookup(Opaque) is None

    def test_value_error_is_wrapped(self):
        registry = ConverterRegistry({complex: complex})
        with pytest.raises(ConversionError):
            registry.convert("not complex", complex)
