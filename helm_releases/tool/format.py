"""Library for formatting command output as tables, YAML or JSON."""

from abc import ABC, abstractmethod
import json
import sys
from typing import Any, Generator, TextIO

import yaml


PADDING = 4


def column_widths(rows: list[list[str]]) -> list[int]:
    """Return the width of the widest value in each column."""
    return [max(len(value) for value in column) for column in zip(*rows)]


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the rows aligned in columns, headers first."""
    table = [headers, *rows]
    widths = column_widths(table)
    for row in table:
        line = "".join(
            value.ljust(width + PADDING) for value, width in zip(row, widths)
        )
        yield line.rstrip()


class PrintFormatter:
    """Prints a list of records as a human readable table."""

    def __init__(self, keys: list[str] | None = None):
        """Initialize the PrintFormatter with the columns to print.

        When no keys are given the columns are the keys of the first record.
        Records missing a key print an empty cell.
        """
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Yield the lines of the table."""
        if not data:
            return
        keys = self._keys if self._keys is not None else list(data[0])
        rows = [[str(record.get(key, "")) for key in keys] for record in data]
        yield from format_columns([key.upper() for key in keys], rows)

    def print(self, data: list[dict[str, Any]], file: TextIO = sys.stdout) -> None:
        """Print the table."""
        for line in self.format(data):
            print(line, file=file)


class StructFormatter(ABC):
    """Prints plain data structures in a serialization format."""

    @abstractmethod
    def dumps(self, data: Any) -> str:
        """Serialize the data."""

    def print(self, data: Any, file: TextIO = sys.stdout) -> None:
        """Print the serialized data."""
        content = self.dumps(data)
        print(content, end="" if content.endswith("\n") else "\n", file=file)


class YamlFormatter(StructFormatter):
    """Prints a YAML document."""

    def dumps(self, data: Any) -> str:
        return yaml.dump(data, sort_keys=False, explicit_start=True)


class JsonFormatter(StructFormatter):
    """Prints a JSON document."""

    def dumps(self, data: Any) -> str:
        return json.dumps(data, indent=4, sort_keys=False)


FORMATTERS: dict[str, type[StructFormatter]] = {
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}


def formatter(output: str | None) -> StructFormatter | None:
    """Return the structured formatter for an output flag, if any."""
    if output is None or (cls := FORMATTERS.get(output)) is None:
        return None
    return cls()
