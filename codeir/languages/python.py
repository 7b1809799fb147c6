"""Python support: ast-based parser and IR converter."""

from __future__ import annotations

import ast
import io
import logging
import tokenize
from collections.abc import Iterable
from pathlib import Path

from codeir.config import SOURCE_ENCODING
from codeir.core.exceptions import ConversionError, ParseError, SourceReadError
from codeir.core.models import (
    CodeUnit,
    Definition,
    DefinitionBuilder,
    DefinitionKind,
    Documentation,
    Position,
    Reference,
    ReferenceKind,
    Scope,
    ScopeLevel,
    UnitType,
)
from codeir.core.validation import require_non_null, safe_execute
from codeir.languages.analyzer import Analyzer
from codeir.languages.docstrings import parse_docstring
from codeir.languages.models import ParseResult
from codeir.languages.source import SourceText

logger = logging.getLogger(__name__)

FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)
ASSIGN_NODES = (ast.Assign, ast.AnnAssign)
DOCUMENTED_NODES = (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)

ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
PROPERTY_DECORATORS = frozenset({"property", "cached_property"})
ACCESSOR_DECORATORS = frozenset({"setter", "deleter"})


class PythonParser:
    """Parser for Python source files using the ast module."""

    def parse(self, file: Path) -> ParseResult:
        """Read and parse a Python file.

        The encoding comes from a BOM or a PEP 263 coding cookie, else UTF-8.
        """
        try:
            source = file.read_bytes()
        except OSError as e:
            raise SourceReadError(f"Cannot read {file}: {e}") from e

        try:
            encoding, _ = tokenize.detect_encoding(io.BytesIO(source).readline)
            text = source.decode(encoding)
        except (SyntaxError, LookupError, UnicodeDecodeError) as e:
            return ParseResult(path=file, source=source, tree=None, problems=(f"Cannot decode {file}: {e}",))
        return self._parse(text, file)

    def parse_text(self, source: str, path: Path | None = None) -> ParseResult:
        return self._parse(source, path)

    def _parse(self, text: str, path: Path | None) -> ParseResult:
        filename = str(path) if path is not None else "<string>"
        # ast column offsets count UTF-8 bytes, so positions are mapped over the re-encoded text
        source = text.encode(SOURCE_ENCODING)
        try:
            tree = ast.parse(text, filename=filename)
        except SyntaxError as e:
            problem = f"Syntax error at line {e.lineno or 1}, column {e.offset or 1}: {e.msg}"
            return ParseResult(path=path, source=source, tree=None, problems=(problem,))
        except ValueError as e:
            # Null bytes on older interpreters
            return ParseResult(path=path, source=source, tree=None, problems=(f"Syntax error: {e}",))

        return ParseResult(path=path, source=source, tree=tree)


def get_name_from_node(node: ast.AST | None) -> str | None:
    """Extract a dotted name from a Name, Attribute, Call or Subscript node."""
    if node is None:
        return None

    if isinstance(node, ast.Name):
        return node.id
    elif isinstance(node, ast.Attribute):
        value_name = get_name_from_node(node.value)
        if value_name:
            return f"{value_name}.{node.attr}"
        return node.attr
    elif isinstance(node, ast.Call):
        return get_name_from_node(node.func)
    elif isinstance(node, ast.Subscript):
        return get_name_from_node(node.value)
    return None


def path_to_module(path: Path | None, source_root: Path | None) -> list[str]:
    """Module name parts of ``path`` below ``source_root``; empty when outside it."""
    if path is None or source_root is None:
        return []
    try:
        relative = path.resolve().relative_to(source_root.resolve())
    except ValueError:
        return []

    parts = list(relative.with_suffix("").parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    return parts


def _last_segment(name: str | None) -> str:
    return (name or "").rsplit(".", 1)[-1]


def _type_level(name: str) -> ScopeLevel:
    return ScopeLevel.PACKAGE if name.startswith("_") else ScopeLevel.GLOBAL


def _member_level(name: str) -> ScopeLevel:
    if name.startswith("__") and name.endswith("__"):
        return ScopeLevel.GLOBAL
    if name.startswith("__"):
        return ScopeLevel.TYPE
    if name.startswith("_"):
        return ScopeLevel.PACKAGE
    return ScopeLevel.GLOBAL


def _decorator_names(node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef) -> set[str]:
    return {_last_segment(get_name_from_node(d)) for d in node.decorator_list}


def _parameter_names(args: ast.arguments, skip_first: bool) -> list[str]:
    positional = [a.arg for a in (*args.posonlyargs, *args.args)]
    if skip_first:
        positional = positional[1:]
    names = positional
    if args.vararg:
        names.append(args.vararg.arg)
    names.extend(a.arg for a in args.kwonlyargs)
    if args.kwarg:
        names.append(args.kwarg.arg)
    return names


class _ImportCollector(ast.NodeVisitor):
    """Collect imported names in source order, resolving relative imports."""

    def __init__(self, module_parts: list[str]) -> None:
        self.imports: list[str] = []
        self._module_parts = module_parts

    def visit_Import(self, node: ast.Import) -> None:
        """Handle: import foo, import foo.bar, import foo as f"""
        for alias in node.names:
            self.imports.append(alias.name)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        """Handle: from foo import bar, from . import bar, from foo import *"""
        module = node.module or ""

        if node.level > 0:
            module = self._resolve_relative_import(node.level, module)

        for alias in node.names:
            if alias.name == "*":
                self.imports.append(f"{module}.*")
            else:
                self.imports.append(f"{module}.{alias.name}" if module else alias.name)

    def _resolve_relative_import(self, level: int, module: str) -> str:
        """Resolve a relative import to an absolute module path."""
        parts = self._module_parts
        if len(parts) < level:
            return module

        base_parts = parts[:-level]
        if module:
            return ".".join(base_parts + [module])
        return ".".join(base_parts)


class PythonConverter:
    """Converts parsed Python modules.

    ``source_root`` anchors the package name of each module; modules outside
    it get an empty package name.
    """

    def __init__(self, source_root: Path | None = None) -> None:
        self._source_root = source_root

    def convert(self, parsed: ParseResult) -> CodeUnit:
        require_non_null(parsed, "parsed")
        if not parsed.successful:
            detail = "; ".join(parsed.problems) or "no syntax tree"
            raise ParseError(f"Failed to parse {parsed.unit_name}: {detail}", parsed.problems)

        try:
            unit = _ModuleConversion(parsed, self._source_root).unit()
        except (ParseError, ConversionError):
            raise
        except Exception as e:
            raise ConversionError(f"Failed to convert {parsed.unit_name}: {e}") from e

        logger.debug("Converted %s: %d definitions", unit.name, len(unit.definitions))
        return unit


class _ModuleConversion:
    """Conversion of a single module; collects definitions in source order."""

    def __init__(self, parsed: ParseResult, source_root: Path | None) -> None:
        self._parsed = parsed
        self._tree: ast.Module = parsed.tree
        self._text = SourceText(parsed.source)
        self._module_parts = path_to_module(parsed.path, source_root)
        self._definitions: list[Definition] = []

    def unit(self) -> CodeUnit:
        for stmt in self._tree.body:
            if isinstance(stmt, ast.ClassDef):
                self._class(stmt, owner=None)
            elif isinstance(stmt, FUNCTION_NODES):
                self._definitions.append(self._function(stmt, owner=None).build())
                self._classes_within(ast.iter_child_nodes(stmt), owner=None)
            elif isinstance(stmt, ASSIGN_NODES):
                self._definitions.extend(self._variables(stmt, owner=None))
            else:
                self._classes_within(ast.iter_child_nodes(stmt), owner=None)

        collector = _ImportCollector(self._module_parts)
        collector.visit(self._tree)

        return (
            CodeUnit.builder()
            .name(self._parsed.unit_name)
            .type(UnitType.MODULE)
            .add_definitions(self._definitions)
            .documentation(self._docstring(self._tree))
            .add_metadata("packageName", ".".join(self._module_parts[:-1]))
            .add_metadata("imports", collector.imports)
            .add_metadata("language", "python")
            .build()
        )

    # -- positions ---------------------------------------------------------

    def _start(self, node: ast.expr | ast.stmt) -> Position:
        return self._text.position_at_line_column(node.lineno, node.col_offset)

    def _span(self, node: ast.expr | ast.stmt) -> tuple[Position, Position]:
        def span() -> tuple[Position, Position] | None:
            if node.end_lineno is None or node.end_col_offset is None:
                return None
            return self._text.span(
                self._text.line_start(node.lineno) + node.col_offset,
                self._text.line_start(node.end_lineno) + node.end_col_offset,
            )

        return safe_execute(span, f"Missing source range for {type(node).__name__} at line {node.lineno}")

    # -- building blocks ---------------------------------------------------

    def _docstring(self, node: ast.AST) -> Documentation | None:
        if not isinstance(node, DOCUMENTED_NODES):
            return None
        docstring = ast.get_docstring(node)
        if docstring is None:
            return None
        return parse_docstring(docstring, self._start(node.body[0]))

    def _decorator_references(self, node: ast.stmt) -> list[Reference]:
        references = []
        for decorator in getattr(node, "decorator_list", []):
            name = get_name_from_node(decorator)
            if name:
                references.append(
                    Reference.builder()
                    .kind(ReferenceKind.USE)
                    .target_name(name)
                    .position(self._start(decorator))
                    .add_metadata("decorator", True)
                    .build()
                )
        return references

    def _builder(
        self,
        node: ast.stmt,
        name: str,
        kind: DefinitionKind,
        level: ScopeLevel,
        owner: str | None,
        children: Iterable[Scope] = (),
    ) -> DefinitionBuilder:
        start, end = self._span(node)
        builder = (
            Definition.builder()
            .name(name)
            .kind(kind)
            .scope(Scope.builder().level(level).start(start).end(end).add_children(children).build())
            .position(start)
            .documentation(self._docstring(node))
            .add_references(self._decorator_references(node))
        )
        if owner is not None:
            builder.add_metadata("declaringType", owner)
        return builder

    def _classes_within(self, nodes: Iterable[ast.AST], owner: str | None) -> None:
        for node in nodes:
            if isinstance(node, ast.ClassDef):
                self._class(node, owner)
            else:
                self._classes_within(ast.iter_child_nodes(node), owner)

    # -- classes -----------------------------------------------------------

    def _class(self, node: ast.ClassDef, owner: str | None) -> None:
        bases = [(get_name_from_node(base), base) for base in node.bases]
        bases = [(name, base) for name, base in bases if name and name != "object"]
        base_names = [_last_segment(name) for name, _ in bases]
        tails = set(base_names)

        if "Protocol" in tails:
            kind = DefinitionKind.INTERFACE
        elif tails & ENUM_BASES:
            kind = DefinitionKind.ENUM
        else:
            kind = DefinitionKind.TYPE

        members = self._members(node) if kind is DefinitionKind.TYPE else []
        level = _member_level(node.name) if owner else _type_level(node.name)
        builder = self._builder(node, node.name, kind, level, owner, (m.scope for m in members))
        builder.add_references(
            Reference.builder()
            .kind(ReferenceKind.EXTEND)
            .target_name(_last_segment(name))
            .position(self._start(base))
            .add_metadata("qualifiedName", name)
            .build()
            for name, base in bases
        )

        if kind is DefinitionKind.INTERFACE:
            builder.add_metadata(
                "superInterfaces", [name for name in base_names if name != "Protocol"]
            )
        elif kind is DefinitionKind.ENUM:
            builder.add_metadata("constants", self._enum_constants(node))
        else:
            builder.add_metadata("isAbstract", self._is_abstract(node, tails))
            builder.add_metadata("superclass", base_names[0] if base_names else None)
            builder.add_metadata("bases", base_names)

        self._definitions.append(builder.build())
        self._definitions.extend(members)
        self._classes_within(node.body, owner=node.name)

    def _is_abstract(self, node: ast.ClassDef, base_tails: set[str]) -> bool:
        if "ABC" in base_tails:
            return True
        for keyword in node.keywords:
            if keyword.arg == "metaclass" and _last_segment(get_name_from_node(keyword.value)) == "ABCMeta":
                return True
        return any(
            "abstractmethod" in _decorator_names(stmt) for stmt in node.body if isinstance(stmt, FUNCTION_NODES)
        )

    def _enum_constants(self, node: ast.ClassDef) -> list[str]:
        constants = []
        for stmt in node.body:
            if isinstance(stmt, ast.Assign):
                targets = stmt.targets
            elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
                targets = [stmt.target]
            else:
                continue
            constants.extend(
                target.id for target in targets if isinstance(target, ast.Name) and not target.id.startswith("_")
            )
        return constants

    def _members(self, node: ast.ClassDef) -> list[Definition]:
        members: list[Definition] = []
        for stmt in node.body:
            if isinstance(stmt, FUNCTION_NODES):
                decorators = _decorator_names(stmt)
                if decorators & ACCESSOR_DECORATORS:
                    continue
                if decorators & PROPERTY_DECORATORS:
                    members.append(self._property(stmt, node.name))
                else:
                    members.append(self._function(stmt, owner=node.name).build())
            elif isinstance(stmt, ASSIGN_NODES):
                members.extend(self._variables(stmt, owner=node.name))
        return members

    # -- members -----------------------------------------------------------

    def _function(self, node: ast.FunctionDef | ast.AsyncFunctionDef, owner: str | None) -> DefinitionBuilder:
        decorators = _decorator_names(node)
        is_static = "staticmethod" in decorators
        level = _member_level(node.name) if owner else _type_level(node.name)

        builder = self._builder(node, node.name, DefinitionKind.FUNCTION, level, owner)
        builder.add_metadata("parameters", _parameter_names(node.args, skip_first=owner is not None and not is_static))
        if owner is not None and node.name == "__init__":
            builder.add_metadata("isConstructor", True)
        else:
            builder.add_metadata("returnType", ast.unparse(node.returns) if node.returns else None)
        return (
            builder.add_metadata("isStatic", is_static)
            .add_metadata("isAbstract", "abstractmethod" in decorators)
            .add_metadata("isAsync", isinstance(node, ast.AsyncFunctionDef))
        )

    def _property(self, node: ast.FunctionDef | ast.AsyncFunctionDef, owner: str) -> Definition:
        return (
            self._builder(node, node.name, DefinitionKind.PROPERTY, _member_level(node.name), owner)
            .add_metadata("type", ast.unparse(node.returns) if node.returns else None)
            .add_metadata("isAbstract", "abstractmethod" in _decorator_names(node))
            .build()
        )

    def _variables(self, node: ast.Assign | ast.AnnAssign, owner: str | None) -> list[Definition]:
        if isinstance(node, ast.AnnAssign):
            targets = [node.target]
            annotation = node.annotation
        else:
            targets = node.targets
            annotation = None

        names: list[str] = []
        for target in targets:
            if isinstance(target, ast.Name):
                names.append(target.id)
            elif isinstance(target, (ast.Tuple, ast.List)):
                names.extend(elt.id for elt in target.elts if isinstance(elt, ast.Name))

        type_name = ast.unparse(annotation) if annotation is not None else None
        is_final = annotation is not None and _last_segment(get_name_from_node(annotation)) == "Final"

        definitions = []
        for name in names:
            level = _member_level(name) if owner else _type_level(name)
            builder = (
                self._builder(node, name, DefinitionKind.VARIABLE, level, owner)
                .add_metadata("type", type_name)
                .add_metadata("isFinal", is_final)
            )
            if owner is not None:
                builder.add_metadata("isStatic", True)
            definitions.append(builder.build())
        return definitions


class PythonAnalyzer(Analyzer):
    """Python analyzer backed by the ast module."""

    language = "python"

    def __init__(self, source_root: Path | None = None) -> None:
        super().__init__(PythonParser(), PythonConverter(source_root), source_root)
