"""Exception types raised by rspec-lint."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class RspecLintError(Exception):
    """Base class for all rspec-lint errors."""


class ParseError(RspecLintError):
    """Source could not be parsed into a syntax tree."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None, line: int = 0, column: int = 0):
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column
        location = f"{self.path or '<source>'}:{line}:{column + 1}"
        super().__init__(f"{location}: {message}")


class ConfigError(RspecLintError):
    """A configuration file could not be read or decoded."""
