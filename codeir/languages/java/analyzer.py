"""Analyzer for Java source files."""

from __future__ import annotations

from pathlib import Path

from codeir.languages.analyzer import Analyzer
from codeir.languages.java.converter import JavaConverter
from codeir.languages.java.parser import JavaParser


class JavaAnalyzer(Analyzer):
    """Java analyzer backed by tree-sitter."""

    language = "java"

    def __init__(self, source_root: Path | None = None) -> None:
        super().__init__(JavaParser(), JavaConverter(), source_root)
