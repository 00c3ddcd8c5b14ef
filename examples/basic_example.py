#!/usr/bin/env python3
"""
Example script demonstrating the usage of DataclassCommandLineParser.

Run it with, for example:

    python basic_example.py report.csv out1 out2 /rows:100 /verbose /format:json
    python basic_example.py @args.rsp
"""

import enum
import sys
from dataclasses import dataclass, field

from dataclass_cmdline import DataclassCommandLineParser


class OutputFormat(enum.Enum):
    CSV = "csv"
    JSON = "json"


@dataclass
class ConvertOptions:
    """Options for a file conversion tool."""

    source: str = field(default="", metadata={"required": True})
    destinations: list[str] = field(default_factory=list, metadata={"required": True})
    rows: int = 0
    format: OutputFormat = OutputFormat.CSV
    verbose: bool = False
    columns: list[str] = field(default_factory=list, metadata={"name": "column"})


def main() -> int:
    options = ConvertOptions()
    parser = DataclassCommandLineParser(options)

    if not parser.parse():
        return 2

    print("Parsed options:")
    print("-" * 30)
    print(f"Source: {options.source}")
    print(f"Destinations: {', '.join(options.destinations)}")
    print(f"Rows: {options.rows or 'all'}")
    print(f"Format: {options.format.value}")
    print(f"Verbose: {options.verbose}")
    print(f"Columns: {options.columns or 'all'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
