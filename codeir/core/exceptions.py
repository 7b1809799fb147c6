"""codeir custom exceptions."""

from __future__ import annotations


class CodeIRError(Exception):
    """Base exception for codeir errors."""


class InvalidArgumentError(CodeIRError, ValueError):
    """A null, blank or out-of-range value was given to a builder or validator."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class ParseError(CodeIRError):
    """The parser could not produce a syntax tree for a source file."""

    def __init__(self, message: str, problems: list[str] | tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.problems = tuple(problems)


class ConversionError(CodeIRError):
    """A structural assumption failed while converting a syntax tree."""


class SourceReadError(CodeIRError, OSError):
    """A source file could not be read."""
