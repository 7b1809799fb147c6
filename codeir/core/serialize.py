"""Convert IR entities to JSON-serializable dicts."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from codeir.core.models import (
    CodeUnit,
    Definition,
    Documentation,
    DocumentationTag,
    Position,
    Reference,
    Scope,
)


def _plain(value: Any) -> Any:
    """Turn frozen metadata values back into plain JSON types."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_plain(v) for v in value)
    return value


def position_to_dict(position: Position | None) -> dict[str, int] | None:
    if position is None:
        return None
    return {"line": position.line, "column": position.column, "offset": position.offset}


def scope_to_dict(scope: Scope) -> dict[str, Any]:
    return {
        "level": scope.level.value,
        "start": position_to_dict(scope.start),
        "end": position_to_dict(scope.end),
        "children": [scope_to_dict(c) for c in scope.children],
        "metadata": _plain(scope.metadata),
    }


def reference_to_dict(reference: Reference) -> dict[str, Any]:
    return {
        "kind": reference.kind.value,
        "target_name": reference.target_name,
        "position": position_to_dict(reference.position),
        "metadata": _plain(reference.metadata),
    }


def tag_to_dict(tag: DocumentationTag) -> dict[str, Any]:
    return {"name": tag.name, "value": tag.value, "attributes": _plain(tag.attributes)}


def documentation_to_dict(documentation: Documentation | None) -> dict[str, Any] | None:
    if documentation is None:
        return None
    return {
        "description": documentation.description,
        "format": documentation.format.value,
        "position": position_to_dict(documentation.position),
        "tags": [tag_to_dict(t) for t in documentation.tags],
        "metadata": _plain(documentation.metadata),
    }


def definition_to_dict(definition: Definition, include_ids: bool = True) -> dict[str, Any]:
    result: dict[str, Any] = {
        "name": definition.name,
        "kind": definition.kind.value,
        "scope": scope_to_dict(definition.scope),
        "position": position_to_dict(definition.position),
        "references": [reference_to_dict(r) for r in definition.references],
        "documentation": documentation_to_dict(definition.documentation),
        "metadata": _plain(definition.metadata),
    }
    if include_ids:
        result = {"id": definition.id, **result}
    return result


def unit_to_dict(unit: CodeUnit, include_ids: bool = True) -> dict[str, Any]:
    """Convert a CodeUnit and everything it owns to a dict.

    Dependencies are shared, not owned, so only their names (and ids) are
    included; this also keeps cyclic dependency graphs finite.
    """
    result: dict[str, Any] = {
        "name": unit.name,
        "type": unit.type.value,
        "definitions": [definition_to_dict(d, include_ids) for d in unit.definitions],
        "dependencies": [
            {"id": dep.id, "name": dep.name} if include_ids else {"name": dep.name}
            for dep in unit.dependencies
        ],
        "documentation": documentation_to_dict(unit.documentation),
        "metadata": _plain(unit.metadata),
    }
    if include_ids:
        result = {"id": unit.id, **result}
    return result
