"""Data models for the codeir intermediate representation.

Every entity is frozen once constructed. Sequences are stored as tuples and
maps as read-only views over a private copy, so nothing handed to a
constructor can later change the entity. Each entity also has a builder that
accumulates fields and list elements before sealing them with ``build()``.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeVar

from codeir.core.exceptions import InvalidArgumentError
from codeir.core.validation import require_instance, require_non_empty


class ScopeLevel(Enum):
    """Cross-language ranking of visibility and nesting."""

    GLOBAL = "global"
    PACKAGE = "package"
    TYPE = "type"
    FUNCTION = "function"
    BLOCK = "block"
    OTHER = "other"


class DefinitionKind(Enum):
    """Kinds of named constructs."""

    TYPE = "type"
    INTERFACE = "interface"
    ENUM = "enum"
    FUNCTION = "function"
    VARIABLE = "variable"
    MODULE = "module"
    PROPERTY = "property"
    PARAMETER = "parameter"
    OTHER = "other"


class ReferenceKind(Enum):
    """Ways one definition can point at another named entity."""

    USE = "use"
    MODIFY = "modify"
    EXTEND = "extend"
    IMPLEMENT = "implement"
    IMPORT = "import"
    OTHER = "other"


class DocumentationFormat(Enum):
    """How a documentation block is written."""

    PLAIN_TEXT = "plain_text"
    MARKDOWN = "markdown"
    JAVADOC = "javadoc"
    JSDOC = "jsdoc"
    DOCSTRING = "docstring"
    OTHER = "other"


class UnitType(Enum):
    """Ways code is organized into units."""

    FILE = "file"
    MODULE = "module"
    NAMESPACE = "namespace"
    PACKAGE = "package"
    LIBRARY = "library"
    OTHER = "other"


def new_id() -> str:
    """Generate a globally unique entity id."""
    return str(uuid.uuid4())


def _freeze_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze_value(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze_value(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value


def _freeze_mapping(value: Mapping[str, Any] | None, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, Mapping):
        raise InvalidArgumentError(f"{field_name} must be a mapping", field_name)
    return MappingProxyType({str(k): _freeze_value(v) for k, v in value.items()})


def _freeze_items(
    value: Iterable[Any] | None, item_type: type, field_name: str
) -> tuple[Any, ...]:
    items = tuple(value) if value is not None else ()
    for item in items:
        require_instance(item, item_type, f"{field_name} element")
    return items


def _hash_key(value: Any) -> Any:
    """Hashable stand-in for a frozen value; mapping views become sorted item tuples."""
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda item: str(item[0]))
        return tuple((k, _hash_key(v)) for k, v in items)
    if isinstance(value, tuple):
        return tuple(_hash_key(v) for v in value)
    return value


def _set(instance: object, name: str, value: Any) -> None:
    object.__setattr__(instance, name, value)


# --- Entities ---


@dataclass(frozen=True)
class Position:
    """A location in source code.

    ``line`` and ``column`` are 1-based; ``offset`` is the 0-based character
    offset from the start of the unit.
    """

    line: int
    column: int
    offset: int = 0

    def __post_init__(self) -> None:
        for name in ("line", "column", "offset"):
            value = getattr(self, name)
            if value is None:
                raise InvalidArgumentError(f"{name} cannot be null", name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(f"{name} must be an integer", name)
        if self.line < 1:
            raise InvalidArgumentError("Line number must be positive", "line")
        if self.column < 1:
            raise InvalidArgumentError("Column number must be positive", "column")
        if self.offset < 0:
            raise InvalidArgumentError("Offset must be non-negative", "offset")

    @classmethod
    def from_zero_based(cls, line: int, column: int, offset: int = 0) -> Position:
        """Create a Position from a 0-based line and column."""
        return cls(line=line + 1, column=column + 1, offset=offset)

    def to_zero_based(self) -> tuple[int, int]:
        """Return ``(line, column)`` as 0-based numbers."""
        return self.line - 1, self.column - 1

    def is_before(self, other: Position) -> bool:
        if self.line != other.line:
            return self.line < other.line
        return self.column < other.column

    def is_after(self, other: Position) -> bool:
        if self.line != other.line:
            return self.line > other.line
        return self.column > other.column

    @classmethod
    def builder(cls) -> PositionBuilder:
        return PositionBuilder()


@dataclass(frozen=True)
class Scope:
    """The lexical span and visibility tier a definition lives in."""

    level: ScopeLevel
    start: Position
    end: Position
    children: tuple[Scope, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_instance(self.level, ScopeLevel, "level")
        require_instance(self.start, Position, "start")
        require_instance(self.end, Position, "end")
        if self.start.is_after(self.end):
            raise InvalidArgumentError("Scope start cannot be after its end", "start")

        children = _freeze_items(self.children, Scope, "children")
        for child in children:
            if not self.contains(child):
                raise InvalidArgumentError(
                    "Child scope must lie within its parent scope", "children"
                )
        _set(self, "children", children)
        _set(self, "metadata", _freeze_mapping(self.metadata, "metadata"))

    def contains(self, other: Scope) -> bool:
        """Check whether ``other`` spans entirely within this scope."""
        return not other.start.is_before(self.start) and not other.end.is_after(self.end)

    def __hash__(self) -> int:
        return hash((self.level, self.start, self.end, self.children, _hash_key(self.metadata)))

    @classmethod
    def builder(cls) -> ScopeBuilder:
        return ScopeBuilder()


@dataclass(frozen=True)
class Reference:
    """A directed, name-only edge from a definition to another entity."""

    kind: ReferenceKind
    target_name: str
    position: Position | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_instance(self.kind, ReferenceKind, "kind")
        require_non_empty(self.target_name, "target_name")
        if self.position is not None:
            require_instance(self.position, Position, "position")
        _set(self, "metadata", _freeze_mapping(self.metadata, "metadata"))

    def __hash__(self) -> int:
        return hash((self.kind, self.target_name, self.position, _hash_key(self.metadata)))

    @classmethod
    def builder(cls) -> ReferenceBuilder:
        return ReferenceBuilder()


@dataclass(frozen=True)
class DocumentationTag:
    """A structured element of a documentation block, such as ``@param``."""

    name: str
    value: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_non_empty(self.name, "name")
        if self.value is None:
            _set(self, "value", "")
        _set(self, "attributes", _freeze_mapping(self.attributes, "attributes"))

    def __hash__(self) -> int:
        return hash((self.name, self.value, _hash_key(self.attributes)))

    @classmethod
    def builder(cls) -> DocumentationTagBuilder:
        return DocumentationTagBuilder()


@dataclass(frozen=True)
class Documentation:
    """Free-text or structured documentation attached to a definition or unit."""

    format: DocumentationFormat
    description: str = ""
    position: Position | None = None
    tags: tuple[DocumentationTag, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_instance(self.format, DocumentationFormat, "format")
        if self.description is None:
            _set(self, "description", "")
        if self.position is not None:
            require_instance(self.position, Position, "position")
        _set(self, "tags", _freeze_items(self.tags, DocumentationTag, "tags"))
        _set(self, "metadata", _freeze_mapping(self.metadata, "metadata"))

    def tags_named(self, name: str) -> list[DocumentationTag]:
        """Return the tags with the given name, in order."""
        return [tag for tag in self.tags if tag.name == name]

    def __hash__(self) -> int:
        return hash((self.format, self.description, self.position, self.tags, _hash_key(self.metadata)))

    @classmethod
    def builder(cls) -> DocumentationBuilder:
        return DocumentationBuilder()


@dataclass(frozen=True, eq=False)
class Definition:
    """A named construct (type, function, variable, ...) found in a code unit.

    Identity is the ``id``; two definitions with the same name are distinct.
    """

    name: str
    kind: DefinitionKind
    scope: Scope
    position: Position
    references: tuple[Reference, ...] = ()
    documentation: Documentation | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    id: str | None = None

    def __post_init__(self) -> None:
        require_non_empty(self.name, "name")
        require_instance(self.kind, DefinitionKind, "kind")
        require_instance(self.scope, Scope, "scope")
        require_instance(self.position, Position, "position")
        if self.documentation is not None:
            require_instance(self.documentation, Documentation, "documentation")
        if self.id is None or not str(self.id).strip():
            _set(self, "id", new_id())
        _set(self, "references", _freeze_items(self.references, Reference, "references"))
        _set(self, "metadata", _freeze_mapping(self.metadata, "metadata"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Definition):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def references_of(self, kind: ReferenceKind) -> list[Reference]:
        """Return the references of the given kind, in order."""
        return [ref for ref in self.references if ref.kind == kind]

    @classmethod
    def builder(cls) -> DefinitionBuilder:
        return DefinitionBuilder()


@dataclass(frozen=True, eq=False)
class CodeUnit:
    """Top-level container for one analyzed file or module.

    ``dependencies`` are shared references to units built elsewhere in the
    same run; a unit owns its definitions and documentation only.
    """

    name: str
    type: UnitType
    definitions: tuple[Definition, ...] = ()
    dependencies: tuple[CodeUnit, ...] = ()
    documentation: Documentation | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    id: str | None = None

    def __post_init__(self) -> None:
        require_non_empty(self.name, "name")
        require_instance(self.type, UnitType, "type")
        if self.documentation is not None:
            require_instance(self.documentation, Documentation, "documentation")
        if self.id is None or not str(self.id).strip():
            _set(self, "id", new_id())
        _set(self, "definitions", _freeze_items(self.definitions, Definition, "definitions"))
        _set(self, "dependencies", _freeze_items(self.dependencies, CodeUnit, "dependencies"))
        _set(self, "metadata", _freeze_mapping(self.metadata, "metadata"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CodeUnit):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def definitions_of(self, kind: DefinitionKind) -> list[Definition]:
        """Return the definitions of the given kind, in order."""
        return [d for d in self.definitions if d.kind == kind]

    @classmethod
    def builder(cls) -> CodeUnitBuilder:
        return CodeUnitBuilder()


# --- Builders ---


class PositionBuilder:
    """Accumulates Position fields; ``offset`` defaults to 0."""

    def __init__(self) -> None:
        self._line: int | None = None
        self._column: int | None = None
        self._offset = 0

    def line(self, line: int) -> PositionBuilder:
        self._line = line
        return self

    def column(self, column: int) -> PositionBuilder:
        self._column = column
        return self

    def offset(self, offset: int) -> PositionBuilder:
        self._offset = offset
        return self

    def build(self) -> Position:
        return Position(line=self._line, column=self._column, offset=self._offset)  # type: ignore[arg-type]


_B = TypeVar("_B", bound="_MetadataBuilder")


class _MetadataBuilder:
    def __init__(self) -> None:
        self._metadata: dict[str, Any] = {}

    def metadata(self: _B, metadata: Mapping[str, Any]) -> _B:
        self._metadata = dict(metadata)
        return self

    def add_metadata(self: _B, key: str, value: Any) -> _B:
        self._metadata[key] = value
        return self


class ScopeBuilder(_MetadataBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._level: ScopeLevel | None = None
        self._start: Position | None = None
        self._end: Position | None = None
        self._children: list[Scope] = []

    def level(self, level: ScopeLevel) -> ScopeBuilder:
        self._level = level
        return self

    def start(self, start: Position) -> ScopeBuilder:
        self._start = start
        return self

    def end(self, end: Position) -> ScopeBuilder:
        self._end = end
        return self

    def add_child(self, child: Scope) -> ScopeBuilder:
        self._children.append(child)
        return self

    def add_children(self, children: Iterable[Scope]) -> ScopeBuilder:
        self._children.extend(children)
        return self

    def build(self) -> Scope:
        return Scope(
            level=self._level,  # type: ignore[arg-type]
            start=self._start,  # type: ignore[arg-type]
            end=self._end,  # type: ignore[arg-type]
            children=tuple(self._children),
            metadata=self._metadata,
        )


class ReferenceBuilder(_MetadataBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._kind: ReferenceKind | None = None
        self._target_name: str | None = None
        self._position: Position | None = None

    def kind(self, kind: ReferenceKind) -> ReferenceBuilder:
        self._kind = kind
        return self

    def target_name(self, target_name: str) -> ReferenceBuilder:
        self._target_name = target_name
        return self

    def position(self, position: Position | None) -> ReferenceBuilder:
        self._position = position
        return self

    def build(self) -> Reference:
        return Reference(
            kind=self._kind,  # type: ignore[arg-type]
            target_name=self._target_name,  # type: ignore[arg-type]
            position=self._position,
            metadata=self._metadata,
        )


class DocumentationTagBuilder:
    def __init__(self) -> None:
        self._name: str | None = None
        self._value = ""
        self._attributes: dict[str, str] = {}

    def name(self, name: str) -> DocumentationTagBuilder:
        self._name = name
        return self

    def value(self, value: str) -> DocumentationTagBuilder:
        self._value = value
        return self

    def add_attribute(self, key: str, value: str) -> DocumentationTagBuilder:
        self._attributes[key] = value
        return self

    def build(self) -> DocumentationTag:
        return DocumentationTag(
            name=self._name,  # type: ignore[arg-type]
            value=self._value,
            attributes=self._attributes,
        )


class DocumentationBuilder(_MetadataBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._description = ""
        self._format: DocumentationFormat | None = None
        self._position: Position | None = None
        self._tags: list[DocumentationTag] = []

    def description(self, description: str) -> DocumentationBuilder:
        self._description = description
        return self

    def format(self, format: DocumentationFormat) -> DocumentationBuilder:
        self._format = format
        return self

    def position(self, position: Position | None) -> DocumentationBuilder:
        self._position = position
        return self

    def add_tag(self, tag: DocumentationTag) -> DocumentationBuilder:
        self._tags.append(tag)
        return self

    def add_tags(self, tags: Iterable[DocumentationTag]) -> DocumentationBuilder:
        self._tags.extend(tags)
        return self

    def build(self) -> Documentation:
        return Documentation(
            format=self._format,  # type: ignore[arg-type]
            description=self._description,
            position=self._position,
            tags=tuple(self._tags),
            metadata=self._metadata,
        )


class DefinitionBuilder(_MetadataBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._id: str | None = None
        self._name: str | None = None
        self._kind: DefinitionKind | None = None
        self._scope: Scope | None = None
        self._position: Position | None = None
        self._references: list[Reference] = []
        self._documentation: Documentation | None = None

    def id(self, id: str) -> DefinitionBuilder:
        self._id = id
        return self

    def name(self, name: str) -> DefinitionBuilder:
        self._name = name
        return self

    def kind(self, kind: DefinitionKind) -> DefinitionBuilder:
        self._kind = kind
        return self

    def scope(self, scope: Scope) -> DefinitionBuilder:
        self._scope = scope
        return self

    def position(self, position: Position) -> DefinitionBuilder:
        self._position = position
        return self

    def documentation(self, documentation: Documentation | None) -> DefinitionBuilder:
        self._documentation = documentation
        return self

    def add_reference(self, reference: Reference) -> DefinitionBuilder:
        self._references.append(reference)
        return self

    def add_references(self, references: Iterable[Reference]) -> DefinitionBuilder:
        self._references.extend(references)
        return self

    def build(self) -> Definition:
        return Definition(
            name=self._name,  # type: ignore[arg-type]
            kind=self._kind,  # type: ignore[arg-type]
            scope=self._scope,  # type: ignore[arg-type]
            position=self._position,  # type: ignore[arg-type]
            references=tuple(self._references),
            documentation=self._documentation,
            metadata=self._metadata,
            id=self._id,
        )


class CodeUnitBuilder(_MetadataBuilder):
    def __init__(self) -> None:
        super().__init__()
        self._id: str | None = None
        self._name: str | None = None
        self._type: UnitType | None = None
        self._definitions: list[Definition] = []
        self._dependencies: list[CodeUnit] = []
        self._documentation: Documentation | None = None

    def id(self, id: str) -> CodeUnitBuilder:
        self._id = id
        return self

    def name(self, name: str) -> CodeUnitBuilder:
        self._name = name
        return self

    def type(self, type: UnitType) -> CodeUnitBuilder:
        self._type = type
        return self

    def documentation(self, documentation: Documentation | None) -> CodeUnitBuilder:
        self._documentation = documentation
        return self

    def add_definition(self, definition: Definition) -> CodeUnitBuilder:
        self._definitions.append(definition)
        return self

    def add_definitions(self, definitions: Iterable[Definition]) -> CodeUnitBuilder:
        self._definitions.extend(definitions)
        return self

    def add_dependency(self, dependency: CodeUnit) -> CodeUnitBuilder:
        self._dependencies.append(dependency)
        return self

    def add_dependencies(self, dependencies: Iterable[CodeUnit]) -> CodeUnitBuilder:
        self._dependencies.extend(dependencies)
        return self

    def build(self) -> CodeUnit:
        return CodeUnit(
            name=self._name,  # type: ignore[arg-type]
            type=self._type,  # type: ignore[arg-type]
            definitions=tuple(self._definitions),
            dependencies=tuple(self._dependencies),
            documentation=self._documentation,
            metadata=self._metadata,
            id=self._id,
        )
