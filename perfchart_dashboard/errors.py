from typing import Any


class PerfChartError(Exception):
    """Base class for the per-file errors raised while loading uploads."""


class DecodeError(PerfChartError):
    """The uploaded file is not a readable spreadsheet."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class ParseError(PerfChartError):
    """A cell expected to be numeric does not parse as a finite number."""

    def __init__(self, column: str, value: Any) -> None:
        super().__init__(f"column {column!r}: cannot parse {value!r} as a number")
        self.column = column
        self.value = value


class EmptySheet(PerfChartError):
    """The first sheet of the workbook has no header row."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"{filename}: the first sheet is empty")
        self.filename = filename
