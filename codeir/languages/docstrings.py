"""Parse Python docstrings (Google sections and Sphinx fields) into Documentation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from codeir.core.models import (
    Documentation,
    DocumentationFormat,
    DocumentationTag,
    Position,
)

GOOGLE_SECTIONS = {
    "args": "param",
    "arguments": "param",
    "parameters": "param",
    "params": "param",
    "keyword args": "keyword",
    "keyword arguments": "keyword",
    "other parameters": "param",
    "attributes": "attribute",
    "returns": "return",
    "return": "return",
    "yields": "yield",
    "yield": "yield",
    "raises": "raises",
    "example": "example",
    "examples": "example",
    "note": "note",
    "notes": "note",
    "see also": "see",
    "todo": "todo",
    "warning": "warning",
    "warnings": "warning",
}

SPHINX_ALIASES = {
    "arg": "param",
    "argument": "param",
    "parameter": "param",
    "key": "keyword",
    "returns": "return",
    "raise": "raises",
    "except": "raises",
    "exception": "raises",
    "ivar": "attribute",
    "cvar": "attribute",
    "var": "attribute",
}

# Sections whose entries start with the name of what they describe
NAMED_SECTIONS = frozenset({"param", "keyword", "attribute", "raises"})

_SECTION = re.compile(r"^([A-Za-z][A-Za-z ]*):$")
_SPHINX_FIELD = re.compile(r"^:(\w+)(?:\s+([^:]+?))?:(?:\s+(.*))?$")
_GOOGLE_ITEM = re.compile(r"^(\*{0,2}[\w.]+)\s*(?:\(([^)]*)\))?\s*:(?:\s+(.*))?$")


@dataclass
class _Tag:
    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    lines: list[str] = field(default_factory=list)

    def build(self) -> DocumentationTag:
        builder = DocumentationTag.builder().name(self.name).value(_join(self.lines))
        for key, value in self.attributes.items():
            builder.add_attribute(key, value)
        return builder.build()


def _join(lines: list[str]) -> str:
    return "\n".join(lines).strip()


def _sphinx_tag(field_name: str, argument: str | None, value: str | None) -> _Tag:
    tag = _Tag(SPHINX_ALIASES.get(field_name, field_name), lines=[value or ""])
    if argument:
        words = argument.split()
        tag.attributes["name"] = words[-1]
        if len(words) > 1:
            tag.attributes["type"] = " ".join(words[:-1])
    return tag


def parse_docstring(docstring: str, position: Position | None = None) -> Documentation:
    """Parse a cleaned docstring (as returned by ``ast.get_docstring``).

    Unindented ``Section:`` headers open a Google-style section; entries of
    ``Args``, ``Raises`` and similar sections become one tag each, with the
    entry name in ``attributes["name"]`` and an optional ``(type)`` in
    ``attributes["type"]``. Other sections become a single tag holding their
    text. ``:field arg: text`` lines become Sphinx tags.
    """
    description: list[str] = []
    tags: list[_Tag] = []
    section: str | None = None
    item_indent: int | None = None
    current: _Tag | None = None

    for line in docstring.expandtabs().splitlines():
        stripped = line.strip()
        indent = len(line) - len(line.lstrip())

        if not stripped:
            if current is not None:
                current.lines.append("")
            elif not tags:
                description.append("")
            continue

        if indent == 0:
            header = _SECTION.match(stripped)
            if header and header.group(1).strip().lower() in GOOGLE_SECTIONS:
                section = GOOGLE_SECTIONS[header.group(1).strip().lower()]
                item_indent = None
                current = None
                if section not in NAMED_SECTIONS:
                    current = _Tag(section)
                    tags.append(current)
                continue

            sphinx = _SPHINX_FIELD.match(stripped)
            if sphinx:
                section = None
                current = _sphinx_tag(*sphinx.groups())
                tags.append(current)
                continue

            section = None
            current = None
            description.append(line.rstrip())
        elif section in NAMED_SECTIONS:
            if item_indent is None:
                item_indent = indent
            item = _GOOGLE_ITEM.match(stripped) if indent <= item_indent else None
            if item:
                name, type_name, text = item.groups()
                current = _Tag(section, {"name": name.lstrip("*")}, [text or ""])
                if type_name:
                    current.attributes["type"] = type_name.strip()
                tags.append(current)
            elif current is not None:
                current.lines.append(stripped)
        elif current is not None:
            current.lines.append(stripped)
        else:
            description.append(line.rstrip())

    return (
        Documentation.builder()
        .format(DocumentationFormat.DOCSTRING)
        .description(_join(description))
        .position(position)
        .add_tags(tag.build() for tag in tags)
        .build()
    )
