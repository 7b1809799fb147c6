"""Data models for language parser results."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

UNKNOWN_UNIT_NAME = "unknown"


@dataclass(frozen=True)
class ParseResult:
    """Result of parsing one source unit (before conversion).

    ``tree`` is whatever the language's parser produces (a tree-sitter tree,
    an ``ast.Module``, ...). It is None when parsing could not start at all;
    ``problems`` lists every diagnostic the parser reported.
    """

    path: Path | None
    source: bytes
    tree: Any
    problems: tuple[str, ...] = ()

    @property
    def successful(self) -> bool:
        return self.tree is not None and not self.problems

    @property
    def unit_name(self) -> str:
        """The file name, or ``"unknown"`` for in-memory sources."""
        return self.path.name if self.path is not None and self.path.name else UNKNOWN_UNIT_NAME
