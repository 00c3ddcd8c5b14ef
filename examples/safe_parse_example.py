#!/usr/bin/env python3
"""
Example demonstrating safe_parse, custom converters and configuration files.

`safe_parse` returns a `result.Result` instead of writing to stderr, which is
useful when the caller wants to decide how to present errors.
"""

import datetime
import os
import tempfile
from dataclasses import dataclass, field

from result import Err, Ok

from dataclass_cmdline import DataclassCommandLineParser


@dataclass
class ReportOptions:
    account: str = field(default="", metadata={"required": True})
    since: datetime.date = datetime.date(2000, 1, 1)
    currency: str = field(default="usd", metadata={"converter": str.upper})
    limit: int = 10


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as config_dir:
        config_path = os.path.join(config_dir, "report.yaml")
        with open(config_path, "w") as f:
            f.write("limit: 50\ncurrency: eur\n")

        for args in (["acme", "/since:2024-01-31"], ["acme", "/since:last-week"]):
            options = ReportOptions()
            parser = DataclassCommandLineParser(
                options,
                prog="report",
                converters={datetime.date: datetime.date.fromisoformat},
            )
            parser.load_config_file(config_path)

            match parser.safe_parse(args):
                case Ok(parsed):
                    print(f"Report for {parsed.account} since {parsed.since}")
                    print(f"  currency: {parsed.currency}, limit: {parsed.limit}")
                case Err(message):
                    print("Could not parse arguments:")
                    print(message)
