"""
Usage text for dataclass_cmdline.

Every failure reported by the parser is rendered by `UsageModel.render`, which
prints the error message followed by a usage line and the list of options.
"""

import dataclasses
import os
import sys
from typing import Iterable, Optional

from .descriptors import FieldDescriptor

RESPONSE_FILE_USAGE = "@responseFile"
INDENT = "    "


def default_program_name() -> str:
    """The name of the running program, without directory or extension."""
    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else "python"
    return os.path.splitext(os.path.basename(argv0))[0]


def usage_fragment(descriptor: FieldDescriptor) -> str:
    if descriptor.required:
        return f"<{descriptor.name}>"
    if descriptor.is_flag:
        return f"/{descriptor.name}"
    return f"/{descriptor.name}:value"


@dataclasses.dataclass(frozen=True)
class UsageModel:
    """Usage fragments for the required and optional fields, in declaration order."""

    required: tuple[str, ...]
    optional: tuple[str, ...]

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[FieldDescriptor]) -> "UsageModel":
        required = []
        optional = []
        for descriptor in descriptors:
            fragments = required if descriptor.required else optional
            fragments.append(usage_fragment(descriptor))
        return cls(required=tuple(required), optional=tuple(optional))

    def format_usage(self, program_name: Optional[str] = None) -> str:
        """
        Render the usage line and the options block.

        Args:
            program_name: Name shown on the usage line. Defaults to the name
                of the running program.

        Returns:
            str: The usage text, ending with a newline.
        """
        program_name = program_name or default_program_name()
        usage_line = " ".join(["Usage:", program_name, *self.required])
        lines = [usage_line, "", "Options:"]
        lines.extend(f"{INDENT}{fragment}" for fragment in self.optional)
        lines.append(f"{INDENT}{RESPONSE_FILE_USAGE}")
        return "\n".join(lines) + "\n"

    def render(self, message: str, program_name: Optional[str] = None) -> str:
        """Render an error message followed by a blank line and the usage text."""
        return f"{message}\n\n{self.format_usage(program_name)}"
