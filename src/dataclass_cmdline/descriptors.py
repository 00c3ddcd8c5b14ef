"""
Field descriptors for dataclass_cmdline.

The options record is inspected once, when the parser is built. Each field of
the dataclass becomes a `FieldDescriptor` that records how the field takes part
in parsing: its display name, whether it is a required positional or a named
option, whether it collects a list of values, and the type values are
converted to.

Field metadata understood here:

    "required":  True makes the field a positional argument.
    "name":      Display name used on the command line instead of the field name.
    "converter": Callable used instead of the registered converter for the type.
"""

import collections.abc
import dataclasses
import typing
from typing import Any, Callable, Optional

from .converters import get_optional_inner_type
from .errors import ConfigurationError

REQUIRED = "required"
NAME = "name"
CONVERTER = "converter"

_LIST_ORIGINS = (list, collections.abc.MutableSequence)


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """Read-only parsing metadata for one field of an options record."""

    attribute: str
    name: str
    required: bool
    is_list: bool
    target_type: Any
    order: int
    converter: Optional[Callable[[str], Any]] = None

    @property
    def key(self) -> str:
        """The case-insensitive lookup key for named options."""
        return self.name.lower()

    @property
    def is_flag(self) -> bool:
        """Whether the option can be given without a value."""
        return not self.is_list and self.target_type is bool


def _list_element_type(type_hint: Any) -> Optional[Any]:
    """
    If type_hint is a mutable sequence type, return its element type.
    Otherwise, return None.
    """
    if type_hint is list:
        return str
    origin = typing.get_origin(type_hint)
    if origin in _LIST_ORIGINS:
        args = typing.get_args(type_hint)
        return args[0] if args else str
    return None


def _check_options_record(options: Any) -> None:
    if not dataclasses.is_dataclass(options) or isinstance(options, type):
        raise ConfigurationError(
            f"Options record must be a dataclass instance, got {options!r}"
        )
    params = getattr(type(options), "__dataclass_params__", None)
    if params is not None and params.frozen:
        raise ConfigurationError(
            f"Options record {type(options).__name__} is frozen and cannot be populated"
        )


def _check_name(name: str, attribute: str) -> None:
    if not name or name[0] in "/@" or ":" in name or name != name.strip():
        raise ConfigurationError(
            f"Invalid option name {name!r} for field '{attribute}'"
        )


def describe_field(field: dataclasses.Field, type_hint: Any, order: int) -> FieldDescriptor:
    """Build the descriptor of a single dataclass field."""
    name = field.metadata.get(NAME, field.name)
    _check_name(name, field.name)

    inner_type = get_optional_inner_type(type_hint)
    if inner_type is not None:
        type_hint = inner_type

    element_type = _list_element_type(type_hint)
    is_list = element_type is not None

    return FieldDescriptor(
        attribute=field.name,
        name=name,
        required=bool(field.metadata.get(REQUIRED, False)),
        is_list=is_list,
        target_type=element_type if is_list else type_hint,
        order=order,
        converter=field.metadata.get(CONVERTER),
    )


def reflect_fields(options: Any) -> list[FieldDescriptor]:
    """
    Describe every field of an options record, in declaration order.

    Args:
        options: A (non-frozen) dataclass instance.

    Returns:
        list[FieldDescriptor]: One descriptor per field.

    Raises:
        ConfigurationError: If the record cannot be parsed into unambiguously.
            Optional names must be unique ignoring case, and at most one
            required field may collect a list, which must be the last
            required field.
    """
    _check_options_record(options)
    type_hints = typing.get_type_hints(type(options))

    descriptors = []
    seen_names: dict[str, FieldDescriptor] = {}
    list_positional: Optional[FieldDescriptor] = None

    for order, field in enumerate(dataclasses.fields(options)):
        type_hint = type_hints.get(field.name, str)
        descriptor = describe_field(field, type_hint, order)

        if descriptor.required:
            if list_positional is not None:
                raise ConfigurationError(
                    f"Required field '{descriptor.name}' cannot follow the list "
                    f"field '{list_positional.name}', which takes all remaining arguments"
                )
            if descriptor.is_list:
                list_positional = descriptor
        else:
            if descriptor.key in seen_names:
                raise ConfigurationError(
                    f"Option name conflict: '{descriptor.name}' and "
                    f"'{seen_names[descriptor.key].name}'"
                )
            seen_names[descriptor.key] = descriptor

        descriptors.append(descriptor)

    return descriptors
