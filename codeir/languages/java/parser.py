"""Java parser built on tree-sitter."""

from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path

import tree_sitter
import tree_sitter_java

from codeir.core.exceptions import SourceReadError
from codeir.languages.models import ParseResult
from codeir.languages.source import SourceText


@lru_cache(maxsize=1)
def java_language() -> tree_sitter.Language:
    """Load the Java grammar once per process."""
    return tree_sitter.Language(tree_sitter_java.language())


def walk(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Yield ``node`` and its descendants in source (pre-)order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


class JavaParser:
    """Parser for Java source files.

    A fresh ``tree_sitter.Parser`` is created for every call, so one
    JavaParser can be shared between threads.
    """

    def parse(self, file: Path) -> ParseResult:
        """Read and parse a Java file."""
        try:
            source = file.read_bytes()
        except OSError as e:
            raise SourceReadError(f"Cannot read {file}: {e}") from e
        return self._parse(source, file)

    def parse_text(self, source: str, path: Path | None = None) -> ParseResult:
        """Parse Java source held in memory."""
        return self._parse(source.encode("utf-8"), path)

    def _parse(self, source: bytes, path: Path | None) -> ParseResult:
        parser = tree_sitter.Parser(java_language())
        tree = parser.parse(source)
        return ParseResult(
            path=path,
            source=source,
            tree=tree,
            problems=tuple(collect_problems(tree.root_node, SourceText(source))),
        )


def collect_problems(root: tree_sitter.Node, text: SourceText) -> list[str]:
    """Describe every ERROR and missing node below ``root``, in source order."""
    if not root.has_error:
        return []

    problems: list[str] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_missing:
            pos = text.position_at(node.start_byte)
            problems.append(f"Missing '{node.type}' at line {pos.line}, column {pos.column}")
        elif node.type == "ERROR":
            pos = text.position_at(node.start_byte)
            problems.append(f"Syntax error at line {pos.line}, column {pos.column}")
        elif node.has_error:
            stack.extend(reversed(node.children))

    if not problems:
        problems.append("Syntax error")
    return problems
