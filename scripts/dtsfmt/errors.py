"""Exceptions raised by the formatter."""


class DtsfmtError(Exception):
    """Base class for all formatter errors."""


class ParseError(DtsfmtError):
    """The devicetree grammar rejected the source text."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


class ConfigError(DtsfmtError):
    """The configuration file could not be read or is invalid."""


class LayoutError(DtsfmtError, ValueError):
    """A keyboard layout is malformed or unknown."""
