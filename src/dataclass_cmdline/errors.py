"""
Exceptions raised by dataclass_cmdline.

`CommandLineError` and its subclasses describe problems with the user's input.
They are raised while tokens are dispatched and bound, and are caught and
rendered at the single `parse()` boundary of the parser. `ConfigurationError`
describes a problem with the options record itself and is raised at
construction time.
"""

from typing import Any


class ConfigurationError(ValueError):
    """The options record cannot be turned into a command-line parser."""


class ConversionError(ValueError):
    """A string could not be converted to the requested type."""


class CommandLineError(Exception):
    """
    Base class for errors in the parsed arguments.

    The message is kept as a `str.format` template plus its arguments so that
    the usage reporter can render every failure the same way.
    """

    template = "{0}"
    args: tuple[Any, ...]

    @property
    def message(self) -> str:
        return self.template.format(*self.args)

    def __str__(self) -> str:
        return self.message


class UnknownOptionError(CommandLineError):
    template = "Unknown option '{0}'"


class MissingArgumentError(CommandLineError):
    template = "Missing argument '{0}'"


class TooManyArgumentsError(CommandLineError):
    template = "Too many arguments"


class ResponseFileError(CommandLineError):
    template = "Error reading response file '{0}'"


class CircularResponseFileError(ResponseFileError):
    template = "Circular response file reference '{0}'"


class InvalidValueError(CommandLineError):
    template = "Invalid value '{0}' for option '{1}'"
