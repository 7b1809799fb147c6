"""
Core module: IR value model, validation, exceptions and the analyzer registry.

Models (models.py):
    - CodeUnit: One analyzed source unit (a file) with its definitions
    - Definition: A named program element (type, function, variable, ...)
    - Scope / Position: Where a definition lives and how far it reaches
    - Reference: A relationship from a definition to a named target
    - Documentation / DocumentationTag: Structured doc comments

Exceptions (exceptions.py):
    - CodeIRError: Base exception for all codeir errors
    - InvalidArgumentError: A value violated an IR invariant
    - ParseError: Source could not be parsed
    - ConversionError: A syntax tree could not be converted
    - SourceReadError: Source file could not be read

Registry (registry.py):
    - AnalyzerRegistry: Maps file extensions to analyzer factories
"""

from codeir.core.exceptions import (
    CodeIRError,
    ConversionError,
    InvalidArgumentError,
    ParseError,
    SourceReadError,
)
from codeir.core.models import (
    CodeUnit,
    Definition,
    DefinitionKind,
    Documentation,
    DocumentationFormat,
    DocumentationTag,
    Position,
    Reference,
    ReferenceKind,
    Scope,
    ScopeLevel,
    UnitType,
)
from codeir.core.registry import AnalyzerRegistry, get_file_extension

__all__ = [
    # Models
    "CodeUnit",
    "Definition",
    "DefinitionKind",
    "Documentation",
    "DocumentationFormat",
    "DocumentationTag",
    "Position",
    "Reference",
    "ReferenceKind",
    "Scope",
    "ScopeLevel",
    "UnitType",
    # Exceptions
    "CodeIRError",
    "ConversionError",
    "InvalidArgumentError",
    "ParseError",
    "SourceReadError",
    # Registry
    "AnalyzerRegistry",
    "get_file_extension",
]
