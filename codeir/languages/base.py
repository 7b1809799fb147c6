"""Protocols for parsers, converters and analyzers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codeir.core.models import CodeUnit, Definition, Documentation
    from codeir.languages.models import ParseResult


class SourceParser(Protocol):
    """Protocol for the external parser of one source language."""

    def parse(self, file: Path) -> ParseResult:
        """Read and parse a file. Raises SourceReadError if it cannot be read."""
        ...

    def parse_text(self, source: str, path: Path | None = None) -> ParseResult:
        """Parse in-memory source text."""
        ...


class LanguageConverter(Protocol):
    """Protocol for converting one parsed source unit into the IR."""

    def convert(self, parsed: ParseResult) -> CodeUnit:
        """Convert a parse result, raising ParseError or ConversionError on failure."""
        ...


class CodeAnalyzer(Protocol):
    """The three-operation analyzer contract handed out by the registry."""

    def parse_file(self, path: Path) -> CodeUnit:
        ...

    def extract_definitions(self, unit: CodeUnit) -> list[Definition]:
        ...

    def extract_documentation(self, unit: CodeUnit) -> list[Documentation]:
        ...
