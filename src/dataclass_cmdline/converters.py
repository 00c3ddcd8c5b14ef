"""
String to value conversion for dataclass_cmdline.

A `ConverterRegistry` maps a target type to a callable taking the raw string
and returning the converted value. Every parser owns its own registry, filled
with defaults for the primitive types and extensible by the caller.
"""

import decimal
import enum
import pathlib
import typing
from typing import Any, Callable, Literal, Optional, Union

from .errors import ConversionError

Converter = Callable[[str], Any]


def get_optional_inner_type(type_hint: Any) -> Optional[Any]:
    """
    If type_hint is Optional[T] (i.e., Union[T, None]), return T.
    Otherwise, return None.
    """
    origin = typing.get_origin(type_hint)
    if origin is Union:
        args = typing.get_args(type_hint)
        # Optional[T] is Union[T, None], so we check for exactly two args with one being NoneType
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and type(None) in args:
            return non_none_args[0]
    return None


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", str(target_type))


def parse_bool(value: str) -> bool:
    """
    Parse a string to a boolean value.

    Accepts 'true' and 'false' in any letter case, as well as '1' and '0'.
    Raises ConversionError for any other string.
    """
    lowered = value.lower()
    if lowered in ("true", "1"):
        return True
    elif lowered in ("false", "0"):
        return False
    else:
        raise ConversionError(
            f"Invalid boolean value: '{value}'. Must be one of: true, false, 1, 0"
        )


def _parse_number(number_type: type) -> Converter:
    def parse(value: str) -> Any:
        try:
            return number_type(value)
        except (ValueError, ArithmeticError):
            raise ConversionError(
                f"Could not convert '{value}' to {number_type.__name__}"
            )

    return parse


def _enum_factory(enum_type: type[enum.Enum]) -> Converter:
    """
    Return a function that looks up an enum member by name or by value.

    Names are matched exactly first and then ignoring case; values are compared
    against the string form of each member's value.
    """

    def parse_enum(value: str) -> enum.Enum:
        members = enum_type.__members__
        if value in members:
            return members[value]
        lowered = value.lower()
        for name, member in members.items():
            if name.lower() == lowered:
                return member
        for member in enum_type:
            if str(member.value) == value:
                return member
        raise ConversionError(
            f"'{value}' is not a member of {enum_type.__name__}"
        )

    return parse_enum


def _literal_factory(literal_type: Any) -> Converter:
    choices = typing.get_args(literal_type)

    def parse_literal(value: str) -> Any:
        for choice in choices:
            if str(choice) == value:
                return choice
        raise ConversionError(
            f"'{value}' is not one of: {', '.join(str(c) for c in choices)}"
        )

    return parse_literal


class ConverterRegistry:
    """
    A table of string converters keyed by target type.

    Example:
        registry = ConverterRegistry()
        registry.register(datetime.date, datetime.date.fromisoformat)
        registry.convert("2024-01-31", datetime.date)
    """

    def __init__(self, converters: Optional[dict[Any, Converter]] = None) -> None:
        self._converters: dict[Any, Converter] = {
            str: str,
            int: _parse_number(int),
            float: _parse_number(float),
            bool: parse_bool,
            pathlib.Path: pathlib.Path,
            decimal.Decimal: _parse_number(decimal.Decimal),
        }
        if converters:
            for target_type, converter in converters.items():
                self.register(target_type, converter)

    def register(self, target_type: Any, converter: Converter) -> None:
        """
        Register (or replace) the converter used for target_type.

        Args:
            target_type: The type values are converted to.
            converter: A callable taking the raw string. Any exception it raises
                is reported as ConversionError.
        """
        if not callable(converter):
            raise TypeError(f"Converter for {_type_name(target_type)} is not callable")
        self._converters[target_type] = converter

    def lookup(self, target_type: Any) -> Optional[Converter]:
        """Return the converter for target_type, or None when there is none."""
        inner_type = get_optional_inner_type(target_type)
        if inner_type is not None:
            target_type = inner_type

        if target_type in self._converters:
            return self._converters[target_type]

        if typing.get_origin(target_type) is Literal:
            return _literal_factory(target_type)

        if isinstance(target_type, type) and issubclass(target_type, enum.Enum):
            return _enum_factory(target_type)

        return None

    def convert(
        self, value: str, target_type: Any, converter: Optional[Converter] = None
    ) -> Any:
        """
        Convert value to target_type.

        Args:
            value: The raw string.
            target_type: The type to convert to.
            converter: Optional converter used instead of the registered one.

        Raises:
            ConversionError: If there is no converter for target_type or the
                converter rejects the value.
        """
        if converter is None:
            converter = self.lookup(target_type)
        if converter is None:
            raise ConversionError(
                f"No converter registered for type {_type_name(target_type)}"
            )
        try:
            return converter(value)
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(
                f"Could not convert '{value}' to {_type_name(target_type)} ({e})"
            ) from e
