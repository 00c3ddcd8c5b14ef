"""
dataclass_cmdline - A declarative command-line parser that populates dataclass instances.

Fields of an options dataclass are bound from command-line arguments according to
their metadata: required fields are positional, every other field is a named option
given as /name:value (or /name for booleans), and @file arguments expand to the
lines of a response file. Errors are reported together with generated usage text.
"""

from .converters import ConverterRegistry
from .descriptors import FieldDescriptor, reflect_fields
from .errors import (
    CircularResponseFileError,
    CommandLineError,
    ConfigurationError,
    ConversionError,
    InvalidValueError,
    MissingArgumentError,
    ResponseFileError,
    TooManyArgumentsError,
    UnknownOptionError,
)
from .parser import DataclassCommandLineParser, ParseState
from .usage import UsageModel

__version__ = "1.0.0"
__all__ = [
    "CircularResponseFileError",
    "CommandLineError",
    "ConfigurationError",
    "ConversionError",
    "ConverterRegistry",
    "DataclassCommandLineParser",
    "FieldDescriptor",
    "InvalidValueError",
    "MissingArgumentError",
    "ParseState",
    "ResponseFileError",
    "TooManyArgumentsError",
    "UnknownOptionError",
    "UsageModel",
    "reflect_fields",
]
