"""
DataclassCommandLineParser - populate a dataclass instance from command-line arguments.

Fields of the options record are described by their dataclass metadata. Fields
tagged ``"required"`` are positional and are filled in declaration order; all
other fields are named options given as ``/name:value`` (or just ``/name`` for
booleans). Arguments of the form ``@file`` are replaced by the lines of that
file. Failures are reported on stderr together with generated usage text.
"""

import collections
import enum
import json
import logging
import os
import sys
from typing import IO, Any, Optional, Sequence

import yaml
from result import Err, Ok, Result

from .converters import Converter, ConverterRegistry
from .descriptors import FieldDescriptor, reflect_fields
from .errors import (
    CircularResponseFileError,
    CommandLineError,
    ConversionError,
    InvalidValueError,
    MissingArgumentError,
    ResponseFileError,
    TooManyArgumentsError,
    UnknownOptionError,
)
from .usage import UsageModel

logger = logging.getLogger(__name__)

RESPONSE_FILE_PREFIX = "@"
OPTION_PREFIX = "/"
VALUE_SEPARATOR = ":"
FLAG_VALUE = "true"


class ParseState(enum.Enum):
    IDLE = "idle"
    AWAITING_TOKENS = "awaiting_tokens"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class DataclassCommandLineParser:
    """
    A command-line parser that binds arguments to the fields of a dataclass instance.

    The options record is owned by the caller and is modified in place. A
    parser is good for a single call to `parse`; call `reset` before parsing
    again.

    Example:
        @dataclass
        class Options:
            input: str = field(default="", metadata={"required": True})
            force: bool = False
            level: int = field(default=1, metadata={"name": "lvl"})

        options = Options()
        parser = DataclassCommandLineParser(options)
        if parser.parse(["foo.txt", "/force", "/lvl:3"]):
            print(options.input, options.force, options.level)
    """

    def __init__(
        self,
        options: Any,
        prog: Optional[str] = None,
        converters: Optional[dict[Any, Converter]] = None,
        stream: Optional[IO[str]] = None,
    ) -> None:
        """
        Initialize the parser from an options record.

        Args:
            options: The dataclass instance to populate.
            prog: Program name shown in usage text. Defaults to the running program.
            converters: Extra string converters keyed by target type.
            stream: Where errors are written. Defaults to sys.stderr.

        Raises:
            ConfigurationError: If the options record has an unusable shape.
        """
        self.options = options
        self.prog = prog
        self.stream = stream
        self.converters = ConverterRegistry(converters)

        self.descriptors: tuple[FieldDescriptor, ...] = tuple(reflect_fields(options))
        self.usage = UsageModel.from_descriptors(self.descriptors)
        self._optional: dict[str, FieldDescriptor] = {
            d.key: d for d in self.descriptors if not d.required
        }
        self._required: collections.deque[FieldDescriptor] = collections.deque(
            self.required_fields
        )
        self._response_files: list[str] = []
        self.state = ParseState.IDLE

    @property
    def required_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(d for d in self.descriptors if d.required)

    @property
    def optional_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(d for d in self.descriptors if not d.required)

    def reset(self) -> None:
        """
        Make the parser ready for another call to `parse`.

        Restores the queue of required fields and empties every list field of
        the options record in place. Scalar fields keep their current values.
        """
        self._required = collections.deque(self.required_fields)
        self._response_files = []
        for descriptor in self.descriptors:
            if descriptor.is_list:
                values = getattr(self.options, descriptor.attribute)
                if values is not None:
                    values.clear()
        self.state = ParseState.IDLE

    def parse(self, args: Optional[Sequence[str]] = None) -> bool:
        """
        Parse command-line arguments into the options record.

        Args:
            args (Optional[Sequence[str]]): Arguments to parse. If None, uses sys.argv[1:].

        Returns:
            bool: True if every argument was bound and all required fields were
            given. False otherwise, after the error and usage text have been
            written to the error stream.
        """
        try:
            self._parse_arguments(args)
        except CommandLineError as e:
            self.show_error(e.template, *e.args)
            return False
        return True

    def safe_parse(self, args: Optional[Sequence[str]] = None) -> Result[Any, str]:
        """
        Parse command-line arguments without writing to the error stream.

        Args:
            args (Optional[Sequence[str]]): Arguments to parse. If None, uses sys.argv[1:].
        Returns:
            Result[Any, str]:
                - Ok with the populated options record,
                - Err with the rendered error and usage text if parsing fails.
        """
        try:
            self._parse_arguments(args)
        except CommandLineError as e:
            return Err(self.format_error(e.template, *e.args))
        return Ok(self.options)

    def parse_or_exit(self, args: Optional[Sequence[str]] = None) -> Any:
        """
        Parse command-line arguments and return the options record.

        Raises:
            SystemExit: With status 2 if parsing fails, like argparse does.
        """
        if not self.parse(args):
            raise SystemExit(2)
        return self.options

    def _parse_arguments(self, args: Optional[Sequence[str]]) -> None:
        if self.state is not ParseState.IDLE:
            raise RuntimeError(
                f"Parser has already run (state: {self.state.value}); call reset() first"
            )
        if args is None:
            args = sys.argv[1:]

        self.state = ParseState.AWAITING_TOKENS
        try:
            for arg in args:
                self._parse_argument(arg)
            self._check_required()
        except CommandLineError as e:
            self.state = ParseState.FAILED
            logger.debug("Parsing failed: %s", e)
            raise
        self.state = ParseState.SUCCEEDED

    def _parse_argument(self, arg: str) -> None:
        arg = arg.strip()

        if arg.startswith(RESPONSE_FILE_PREFIX):
            self._parse_response_file(arg[len(RESPONSE_FILE_PREFIX):])
        elif arg.startswith(OPTION_PREFIX):
            name, separator, value = arg[len(OPTION_PREFIX):].partition(VALUE_SEPARATOR)
            if not separator:
                value = FLAG_VALUE

            descriptor = self._optional.get(name.lower())
            if descriptor is None:
                raise UnknownOptionError(name)
            self._bind(descriptor, value)
        else:
            if not self._required:
                raise TooManyArgumentsError()

            # A list field stays at the front and takes all remaining positionals.
            descriptor = self._required[0]
            if not descriptor.is_list:
                self._required.popleft()
            self._bind(descriptor, arg)

    def _parse_response_file(self, filename: str) -> None:
        try:
            real_path = os.path.realpath(filename)
            with open(filename, "r", encoding="utf-8-sig") as f:
                lines = f.read().splitlines()
        except (OSError, ValueError) as e:
            logger.debug("Could not read response file %r: %s", filename, e)
            raise ResponseFileError(filename) from e

        if real_path in self._response_files:
            raise CircularResponseFileError(filename)

        logger.debug("Expanding response file %r (%d lines)", filename, len(lines))
        self._response_files.append(real_path)
        try:
            for line in lines:
                line = line.strip()
                if line:
                    self._parse_argument(line)
        finally:
            self._response_files.pop()

    def _bind(self, descriptor: FieldDescriptor, value: str) -> None:
        try:
            converted = self.converters.convert(
                value, descriptor.target_type, descriptor.converter
            )
        except ConversionError as e:
            logger.debug("Rejected value %r for %s: %s", value, descriptor.name, e)
            raise InvalidValueError(value, descriptor.name) from e

        if descriptor.is_list:
            values = getattr(self.options, descriptor.attribute)
            if values is None:
                values = []
                setattr(self.options, descriptor.attribute, values)
            values.append(converted)
        else:
            setattr(self.options, descriptor.attribute, converted)
        logger.debug("Bound %s = %r", descriptor.name, converted)

    def _check_required(self) -> None:
        for descriptor in self._required:
            if not descriptor.is_list or not getattr(self.options, descriptor.attribute):
                raise MissingArgumentError(descriptor.name)

    def format_usage(self) -> str:
        """Return the usage line and the options block."""
        return self.usage.format_usage(self.prog)

    def format_error(self, template: str, *args: Any) -> str:
        """Return an error message followed by the usage text."""
        return self.usage.render(template.format(*args), self.prog)

    def show_error(self, template: str, *args: Any) -> None:
        """
        Write an error message and the usage text to the error stream.

        Args:
            template: A str.format template, e.g. "Unknown option '{0}'".
            *args: Values substituted into the template.
        """
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(self.format_error(template, *args))
        stream.flush()

    def load_config_file(self, config_path: str) -> None:
        """
        Set optional fields from a YAML or JSON file.

        Keys are option names (case-insensitive) and values are converted the
        same way as command-line values. The value of a list field, a list or
        a single item, replaces its current contents; a later `reset()` empties
        it again. Values given on the command line afterwards take
        precedence.

        Args:
            config_path (str): Path to the configuration file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValueError: If the file format is not supported or invalid, or it
                names an unknown or required option, or holds an invalid value.
        """
        if self.state is not ParseState.IDLE:
            raise RuntimeError("Configuration files must be loaded before parsing")

        config_data = self._read_config_file(config_path)
        if config_data is None:
            return
        if not isinstance(config_data, dict):
            raise ValueError(
                f"Configuration file must contain a mapping, got {type(config_data).__name__}"
            )

        for key, value in config_data.items():
            descriptor = self._optional.get(str(key).lower())
            if descriptor is None:
                if any(d.key == str(key).lower() for d in self.required_fields):
                    raise ValueError(
                        f"Required argument '{key}' cannot be set in a configuration file"
                    )
                raise ValueError(f"Unknown option '{key}' in configuration file")

            if isinstance(value, list) and not descriptor.is_list:
                raise ValueError(f"Option '{key}' does not take a list")
            items = value if isinstance(value, list) else [value]
            if descriptor.is_list:
                setattr(self.options, descriptor.attribute, [])

            for item in items:
                if item is None or isinstance(item, (dict, list)):
                    raise ValueError(f"Invalid value {item!r} for option '{key}'")
                try:
                    self._bind(descriptor, str(item))
                except InvalidValueError as e:
                    raise ValueError(f"{e} in configuration file") from e

    def _read_config_file(self, config_path: str) -> Any:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        file_ext = os.path.splitext(config_path)[1].lower()

        with open(config_path, "r") as f:
            if file_ext in [".yaml", ".yml"]:
                try:
                    return yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid YAML file: {e}")
            elif file_ext == ".json":
                try:
                    return json.load(f)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON file: {e}")
            else:
                raise ValueError(
                    f"Unsupported file format: {file_ext}. "
                    "Supported formats are: .yaml, .yml, .json"
                )
