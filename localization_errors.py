from typing import Optional


class LocalizationError(Exception):
    """Base class for errors raised by the localization modules."""


class ParseError(LocalizationError, ValueError):
    """
    A dictionary blob could not be read.

    line/column are 1-based and point at the offending character. They are None
    when the failure is not tied to a position in the text (schema errors).
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.line}:{self.column}: {self.message}"
        return self.message


class BuilderConsumedError(LocalizationError, RuntimeError):
    """A LocalizationBuilder was used again after build()."""
