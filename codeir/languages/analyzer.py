"""Analyzer façade coupling a parser with a converter."""

from __future__ import annotations

import logging
from pathlib import Path

from codeir.core.exceptions import CodeIRError
from codeir.core.models import CodeUnit, Definition, Documentation
from codeir.core.validation import require_non_null
from codeir.languages.base import LanguageConverter, SourceParser

logger = logging.getLogger(__name__)


class Analyzer:
    """Parses files of one language and converts them to code units.

    Holds only its parser, converter and source root after construction, so
    one instance can serve concurrent callers.
    """

    language = ""

    def __init__(
        self,
        parser: SourceParser,
        converter: LanguageConverter,
        source_root: Path | None = None,
    ) -> None:
        self._parser = require_non_null(parser, "parser")
        self._converter = require_non_null(converter, "converter")
        self._source_root = source_root

    @property
    def source_root(self) -> Path | None:
        return self._source_root

    def parse_file(self, path: Path) -> CodeUnit:
        """Parse and convert a file.

        Raises:
            SourceReadError: The file could not be read.
            ParseError: The parser reported problems.
            ConversionError: The tree did not have the expected structure.
        """
        path = Path(path)
        try:
            unit = self._converter.convert(self._parser.parse(path))
        except CodeIRError as e:
            logger.debug("Failed to analyze %s: %s", path, e)
            raise

        logger.debug("Analyzed %s: %d definitions", path, len(unit.definitions))
        return unit

    def parse_text(self, source: str, path: Path | None = None) -> CodeUnit:
        """Parse and convert in-memory source text."""
        return self._converter.convert(self._parser.parse_text(source, path))

    def extract_definitions(self, unit: CodeUnit) -> list[Definition]:
        return list(unit.definitions)

    def extract_documentation(self, unit: CodeUnit) -> list[Documentation]:
        return [unit.documentation] if unit.documentation is not None else []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source_root={self._source_root!r})"
