"""Exceptions raised while building or reading micro DOM trees."""

from typing import Optional


class MicroDomError(Exception):
    """Base exception for micro DOM failures."""


class MicroDomReadError(MicroDomError):
    """XML input could not be turned into a micro DOM tree."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None) -> None:
        if line is not None:
            message = f"{message} (line {line}, column {column or 0})"
        super().__init__(message)
        self.line = line
        self.column = column
