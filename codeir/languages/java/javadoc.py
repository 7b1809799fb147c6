"""Javadoc comment parsing."""

from __future__ import annotations

import re

from codeir.core.models import (
    Documentation,
    DocumentationFormat,
    DocumentationTag,
    Position,
)

JAVADOC_START = "/**"
JAVADOC_END = "*/"

# Block tags whose first word names something (a parameter, an exception, ...)
NAMED_TAGS = frozenset({"param", "throws", "exception", "serialField"})

_LEADING = re.compile(r"^\s*\*? ?")
_PRE_OPEN = re.compile(r"<pre[\s>]", re.IGNORECASE)
_PRE_CLOSE = re.compile(r"</pre\s*>", re.IGNORECASE)
_BLOCK_TAG = re.compile(r"^@([A-Za-z][\w.-]*)(?:\s+(.*))?$")


def is_javadoc(comment: str) -> bool:
    """Check whether a block comment is a Javadoc comment (``/** ... */``)."""
    return comment.startswith(JAVADOC_START) and comment != "/**/"


def _clean_lines(comment: str) -> list[str]:
    """Comment lines without their leading ``*``.

    Lines inside ``<pre>`` blocks keep their indentation; all others are stripped.
    """
    body = comment[len(JAVADOC_START) :]
    if body.endswith(JAVADOC_END):
        body = body[: -len(JAVADOC_END)]

    lines = []
    preformatted = False
    for raw in body.splitlines():
        line = _LEADING.sub("", raw, count=1).rstrip()
        lines.append(line if preformatted else line.strip())
        opened = [m.start() for m in _PRE_OPEN.finditer(line)]
        closed = [m.start() for m in _PRE_CLOSE.finditer(line)]
        if opened or closed:
            preformatted = max(opened, default=-1) > max(closed, default=-1)
    return lines


def _join(lines: list[str]) -> str:
    return "\n".join(lines).strip()


def parse_tag(name: str, content: str) -> DocumentationTag:
    """Build a tag; for named tags the first word becomes the ``name`` attribute."""
    builder = DocumentationTag.builder().name(name)
    if name in NAMED_TAGS:
        parts = content.split(None, 1)
        if parts:
            builder.add_attribute("name", parts[0])
        return builder.value(parts[1].strip() if len(parts) > 1 else "").build()
    return builder.value(content).build()


def parse_javadoc(comment: str, position: Position | None = None) -> Documentation:
    """Parse the raw text of a Javadoc comment.

    The description is everything before the first line starting with
    ``@``; each such line starts a block tag that runs until the next one.
    Inline tags (``{@link Foo}``) are kept verbatim.
    """
    description: list[str] = []
    tags: list[tuple[str, list[str]]] = []

    for line in _clean_lines(comment):
        match = _BLOCK_TAG.match(line)
        if match:
            tags.append((match.group(1), [match.group(2) or ""]))
        elif tags:
            tags[-1][1].append(line)
        else:
            description.append(line)

    return (
        Documentation.builder()
        .format(DocumentationFormat.JAVADOC)
        .description(_join(description))
        .position(position)
        .add_tags(parse_tag(name, _join(content)) for name, content in tags)
        .build()
    )
