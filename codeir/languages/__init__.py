"""
Language support: parse source files and convert them into the IR.

Each language pairs a parser (which only produces a syntax tree and a list
of problems) with a converter (which maps the tree onto CodeUnit,
Definition, Scope, Reference and Documentation values).

Components:
    - SourceParser / LanguageConverter / CodeAnalyzer: Protocols
    - Analyzer: Facade combining a parser and a converter
    - JavaAnalyzer: tree-sitter based analyzer for .java files
    - PythonAnalyzer: ast based analyzer for .py files
    - default_registry(): AnalyzerRegistry with every bundled language

Adding a new language:
    1. Write a parser returning ParseResult from parse() and parse_text()
    2. Write a converter turning a successful ParseResult into a CodeUnit
    3. Subclass Analyzer and register its extension in default_registry()
"""

from codeir.core.registry import AnalyzerRegistry
from codeir.languages.analyzer import Analyzer
from codeir.languages.base import CodeAnalyzer, LanguageConverter, SourceParser
from codeir.languages.java import JavaAnalyzer
from codeir.languages.models import ParseResult
from codeir.languages.python import PythonAnalyzer


def default_registry() -> AnalyzerRegistry:
    """Registry with the bundled Java and Python analyzers."""
    registry = AnalyzerRegistry()
    registry.register("java", JavaAnalyzer)
    registry.register("py", PythonAnalyzer)
    return registry


__all__ = [
    "Analyzer",
    "CodeAnalyzer",
    "JavaAnalyzer",
    "LanguageConverter",
    "ParseResult",
    "PythonAnalyzer",
    "SourceParser",
    "default_registry",
]
