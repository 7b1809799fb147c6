"""Convert tree-sitter Java syntax trees into code units."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

import tree_sitter

from codeir.core.exceptions import ConversionError, ParseError
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
from codeir.core.validation import is_valid_identifier, require_non_null, safe_execute
from codeir.languages.java.javadoc import is_javadoc, parse_javadoc
from codeir.languages.java.parser import walk
from codeir.languages.models import ParseResult
from codeir.languages.source import SourceText

logger = logging.getLogger(__name__)

TYPE_DECLARATIONS = {
    "class_declaration": DefinitionKind.TYPE,
    "record_declaration": DefinitionKind.TYPE,
    "interface_declaration": DefinitionKind.INTERFACE,
    "annotation_type_declaration": DefinitionKind.INTERFACE,
    "enum_declaration": DefinitionKind.ENUM,
}

# Declarations whose bodies contribute member definitions
CONCRETE_TYPES = frozenset({"class_declaration", "record_declaration"})

CONSTRUCTORS = frozenset({"constructor_declaration", "compact_constructor_declaration"})
ANNOTATIONS = frozenset({"marker_annotation", "annotation"})
NAME_NODES = frozenset({"identifier", "scoped_identifier"})


def strip_type_arguments(name: str) -> str:
    """Drop generic arguments and whitespace: ``Map<K, List<V>>`` -> ``Map``."""
    depth = 0
    kept = []
    for char in name:
        if char == "<":
            depth += 1
        elif char == ">":
            depth = max(depth - 1, 0)
        elif depth == 0 and not char.isspace():
            kept.append(char)
    return "".join(kept)


def simple_type_name(name: str) -> str:
    """Last segment of a type name without type arguments: ``java.util.List<T>`` -> ``List``."""
    return strip_type_arguments(name).rsplit(".", 1)[-1]


def _modifiers_node(node: tree_sitter.Node) -> tree_sitter.Node | None:
    return next((child for child in node.children if child.type == "modifiers"), None)


def _modifiers(node: tree_sitter.Node) -> set[str]:
    modifiers = _modifiers_node(node)
    return {child.type for child in modifiers.children} if modifiers else set()


def _type_level(modifiers: set[str]) -> ScopeLevel:
    return ScopeLevel.GLOBAL if "public" in modifiers else ScopeLevel.PACKAGE


def _member_level(modifiers: set[str]) -> ScopeLevel:
    if "public" in modifiers:
        return ScopeLevel.GLOBAL
    if "private" in modifiers:
        return ScopeLevel.TYPE
    return ScopeLevel.PACKAGE


def _child_of_type(node: tree_sitter.Node | None, node_type: str) -> tree_sitter.Node | None:
    if node is None:
        return None
    return next((child for child in node.children if child.type == node_type), None)


class JavaConverter:
    """Converts parsed Java compilation units.

    Holds no state; every call to :meth:`convert` works on its own
    ``_UnitConversion``.
    """

    def convert(self, parsed: ParseResult) -> CodeUnit:
        require_non_null(parsed, "parsed")
        if not parsed.successful:
            detail = "; ".join(parsed.problems) or "no syntax tree"
            raise ParseError(f"Failed to parse {parsed.unit_name}: {detail}", parsed.problems)

        try:
            unit = _UnitConversion(parsed).unit()
        except (ParseError, ConversionError):
            raise
        except Exception as e:
            raise ConversionError(f"Failed to convert {parsed.unit_name}: {e}") from e

        logger.debug("Converted %s: %d definitions", unit.name, len(unit.definitions))
        return unit

    def documentation_blocks(self, parsed: ParseResult) -> list[Documentation]:
        """Every Javadoc block of a parsed unit, in source order."""
        require_non_null(parsed, "parsed")
        if not parsed.successful:
            raise ParseError(f"Failed to parse {parsed.unit_name}", parsed.problems)
        return list(_UnitConversion(parsed).javadoc_blocks())


class _UnitConversion:
    """Conversion of a single compilation unit."""

    def __init__(self, parsed: ParseResult) -> None:
        self._parsed = parsed
        self._source = parsed.source
        self._text = SourceText(parsed.source)
        self._root: tree_sitter.Node = parsed.tree.root_node

    # -- unit --------------------------------------------------------------

    def unit(self) -> CodeUnit:
        definitions: list[Definition] = []
        for node in walk(self._root):
            if node.type in TYPE_DECLARATIONS:
                definitions.extend(self._type_with_members(node))

        return (
            CodeUnit.builder()
            .name(self._parsed.unit_name)
            .type(UnitType.FILE)
            .add_definitions(definitions)
            .documentation(next(self.javadoc_blocks(), None))
            .add_metadata("packageName", self._package_name())
            .add_metadata("imports", self._imports())
            .add_metadata("language", "java")
            .build()
        )

    def javadoc_blocks(self) -> Iterator[Documentation]:
        for node in walk(self._root):
            if node.type == "block_comment":
                comment = self._node_text(node) or ""
                if is_javadoc(comment):
                    yield parse_javadoc(comment, self._text.position_at(node.start_byte))

    def _package_name(self) -> str:
        package = _child_of_type(self._root, "package_declaration")
        if package is None:
            return ""
        name = next((c for c in package.named_children if c.type in NAME_NODES), None)
        return self._dotted(name) if name is not None else ""

    def _imports(self) -> list[str]:
        imports = []
        for node in self._root.children:
            if node.type != "import_declaration":
                continue
            name = next((c for c in node.named_children if c.type in NAME_NODES), None)
            if name is None:
                continue
            dotted = self._dotted(name)
            if _child_of_type(node, "asterisk") is not None:
                dotted += ".*"
            imports.append(dotted)
        return imports

    # -- helpers -----------------------------------------------------------

    def _node_text(self, node: tree_sitter.Node | None) -> str | None:
        if node is None or node.is_missing:
            return None
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _dotted(self, node: tree_sitter.Node) -> str:
        return "".join((self._node_text(node) or "").split())

    def _type_text(
        self, node: tree_sitter.Node | None, declarator: tree_sitter.Node | None = None
    ) -> str:
        """Whitespace-normalized type text.

        C-style dimensions on ``declarator`` (``int x[]``) are appended.
        """
        text = " ".join((self._node_text(node) or "").split())
        dimensions = declarator.child_by_field_name("dimensions") if declarator is not None else None
        if text and dimensions is not None:
            text += self._dotted(dimensions)
        return text

    def _describe(self, node: tree_sitter.Node) -> str:
        return f"{node.type} at line {node.start_point[0] + 1}"

    def _name_of(self, node: tree_sitter.Node) -> str:
        name = node.child_by_field_name("name")
        text = safe_execute(lambda: self._node_text(name), f"Missing name for {self._describe(node)}")
        if not is_valid_identifier(text):
            logger.debug("Unusual identifier %r for %s", text, self._describe(node))
        return text

    def _span(self, node: tree_sitter.Node) -> tuple[Position, Position]:
        return safe_execute(
            lambda: None if node.is_missing else self._text.span(node.start_byte, node.end_byte),
            f"Missing source range for {self._describe(node)}",
        )

    def _scope(self, level: ScopeLevel, node: tree_sitter.Node, children: Iterable[Scope] = ()) -> Scope:
        start, end = self._span(node)
        return Scope.builder().level(level).start(start).end(end).add_children(children).build()

    def _javadoc_for(self, node: tree_sitter.Node) -> Documentation | None:
        previous = node.prev_sibling
        if previous is None or previous.type != "block_comment":
            return None
        comment = self._node_text(previous) or ""
        if not is_javadoc(comment):
            return None
        return parse_javadoc(comment, self._text.position_at(previous.start_byte))

    def _reference(self, kind: ReferenceKind, node: tree_sitter.Node) -> Reference:
        qualified = strip_type_arguments(self._node_text(node) or "")
        return (
            Reference.builder()
            .kind(kind)
            .target_name(simple_type_name(qualified))
            .position(self._text.position_at(node.start_byte))
            .add_metadata("qualifiedName", qualified)
            .build()
        )

    def _annotation_references(self, node: tree_sitter.Node) -> list[Reference]:
        modifiers = _modifiers_node(node)
        if modifiers is None:
            return []
        references = []
        for child in modifiers.children:
            if child.type not in ANNOTATIONS:
                continue
            name = child.child_by_field_name("name")
            references.append(
                Reference.builder()
                .kind(ReferenceKind.USE)
                .target_name(self._dotted(name) if name is not None else "")
                .position(self._text.position_at(child.start_byte))
                .add_metadata("annotation", True)
                .build()
            )
        return references

    def _type_nodes(self, container: tree_sitter.Node | None) -> list[tree_sitter.Node]:
        """Type nodes of an ``implements``/``extends`` clause."""
        if container is None:
            return []
        type_list = _child_of_type(container, "type_list")
        if type_list is not None:
            return list(type_list.named_children)
        return list(container.named_children)

    def _type_names(self, nodes: list[tree_sitter.Node]) -> list[str]:
        return [simple_type_name(self._node_text(node) or "") for node in nodes]

    def _declaring_type(self, node: tree_sitter.Node) -> str | None:
        parent = node.parent
        while parent is not None:
            if parent.type in TYPE_DECLARATIONS:
                return self._name_of(parent)
            parent = parent.parent
        return None

    def _parameter_names(self, parameters: tree_sitter.Node | None) -> list[str]:
        if parameters is None:
            return []
        names = []
        for parameter in parameters.named_children:
            if parameter.type == "formal_parameter":
                names.append(self._name_of(parameter))
            elif parameter.type == "spread_parameter":
                declarator = _child_of_type(parameter, "variable_declarator")
                if declarator is not None:
                    names.append(self._name_of(declarator))
        return names

    # -- types -------------------------------------------------------------

    def _type_with_members(self, node: tree_sitter.Node) -> list[Definition]:
        name = self._name_of(node)
        modifiers = _modifiers(node)

        members: list[Definition] = []
        if node.type in CONCRETE_TYPES:
            members = self._members(node, name)

        builder = (
            Definition.builder()
            .name(name)
            .kind(TYPE_DECLARATIONS[node.type])
            .scope(self._scope(_type_level(modifiers), node, (m.scope for m in members)))
            .position(self._span(node)[0])
            .documentation(self._javadoc_for(node))
            .add_references(self._annotation_references(node))
        )

        if node.type in CONCRETE_TYPES:
            superclass = node.child_by_field_name("superclass")
            superclass_types = self._type_nodes(superclass)[-1:]
            interfaces = self._type_nodes(node.child_by_field_name("interfaces"))
            builder.add_metadata("isAbstract", "abstract" in modifiers)
            builder.add_metadata("isFinal", "final" in modifiers)
            builder.add_metadata("superclass", next(iter(self._type_names(superclass_types)), None))
            builder.add_metadata("interfaces", self._type_names(interfaces))
            builder.add_references(self._reference(ReferenceKind.EXTEND, t) for t in superclass_types)
            builder.add_references(self._reference(ReferenceKind.IMPLEMENT, t) for t in interfaces)
            if node.type == "record_declaration":
                builder.add_metadata("isRecord", True)
                builder.add_metadata(
                    "components", self._parameter_names(node.child_by_field_name("parameters"))
                )
        elif node.type == "enum_declaration":
            interfaces = self._type_nodes(node.child_by_field_name("interfaces"))
            body = node.child_by_field_name("body")
            constants = [
                self._name_of(child)
                for child in (body.named_children if body is not None else [])
                if child.type == "enum_constant"
            ]
            builder.add_metadata("constants", constants)
            builder.add_metadata("interfaces", self._type_names(interfaces))
            builder.add_references(self._reference(ReferenceKind.IMPLEMENT, t) for t in interfaces)
        else:
            super_interfaces = self._type_nodes(_child_of_type(node, "extends_interfaces"))
            builder.add_metadata("superInterfaces", self._type_names(super_interfaces))
            builder.add_references(self._reference(ReferenceKind.EXTEND, t) for t in super_interfaces)
            if node.type == "annotation_type_declaration":
                builder.add_metadata("isAnnotation", True)

        declaring = self._declaring_type(node)
        if declaring is not None:
            builder.add_metadata("declaringType", declaring)

        return [builder.build(), *members]

    # -- members -----------------------------------------------------------

    def _members(self, node: tree_sitter.Node, owner: str) -> list[Definition]:
        body = node.child_by_field_name("body")
        if body is None:
            return []

        members: list[Definition] = []
        for child in body.named_children:
            if child.type == "method_declaration":
                members.append(self._method(child, owner))
            elif child.type in CONSTRUCTORS:
                members.append(self._constructor(child, owner, node))
            elif child.type == "field_declaration":
                members.extend(self._fields(child, owner))
        return members

    def _member_builder(
        self, node: tree_sitter.Node, name: str, kind: DefinitionKind, owner: str
    ) -> tuple[DefinitionBuilder, set[str]]:
        modifiers = _modifiers(node)
        return (
            Definition.builder()
            .name(name)
            .kind(kind)
            .scope(self._scope(_member_level(modifiers), node))
            .position(self._span(node)[0])
            .documentation(self._javadoc_for(node))
            .add_references(self._annotation_references(node))
            .add_metadata("declaringType", owner)
        ), modifiers

    def _method(self, node: tree_sitter.Node, owner: str) -> Definition:
        name = self._name_of(node)
        return_type = safe_execute(
            lambda: self._type_text(node.child_by_field_name("type"), node) or None,
            f"Missing return type for method '{name}'",
        )
        builder, modifiers = self._member_builder(node, name, DefinitionKind.FUNCTION, owner)
        return (
            builder.add_metadata("returnType", return_type)
            .add_metadata("parameters", self._parameter_names(node.child_by_field_name("parameters")))
            .add_metadata("isStatic", "static" in modifiers)
            .add_metadata("isAbstract", "abstract" in modifiers)
            .build()
        )

    def _constructor(self, node: tree_sitter.Node, owner: str, type_node: tree_sitter.Node) -> Definition:
        builder, _ = self._member_builder(node, self._name_of(node), DefinitionKind.FUNCTION, owner)
        parameters = node.child_by_field_name("parameters")
        if node.type == "compact_constructor_declaration":
            # Compact constructors take the record components implicitly
            parameters = type_node.child_by_field_name("parameters")
        return (
            builder.add_metadata("isConstructor", True)
            .add_metadata("parameters", self._parameter_names(parameters))
            .build()
        )

    def _fields(self, node: tree_sitter.Node, owner: str) -> list[Definition]:
        type_node = node.child_by_field_name("type")
        definitions = []
        for declarator in node.children_by_field_name("declarator"):
            builder, modifiers = self._member_builder(
                node, self._name_of(declarator), DefinitionKind.VARIABLE, owner
            )
            definitions.append(
                builder.add_metadata("type", self._type_text(type_node, declarator))
                .add_metadata("isStatic", "static" in modifiers)
                .add_metadata("isFinal", "final" in modifiers)
                .build()
            )
        return definitions
