"""MCP server implementation for codeir."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from codeir.core.exceptions import CodeIRError
from codeir.core.models import CodeUnit, DefinitionKind
from codeir.core.serialize import definition_to_dict, documentation_to_dict, unit_to_dict
from codeir.languages import default_registry

logger = logging.getLogger(__name__)

server = Server("codeir")

_registry = default_registry()

_PATH_SCHEMA = {
    "type": "string",
    "description": "Path to a source file",
}


def _analyze(path: str) -> CodeUnit:
    """Convert a file with the analyzer registered for its extension."""
    file = Path(path)
    analyzer = _registry.resolve(file)
    if analyzer is None:
        raise CodeIRError(
            f"Unsupported file type: {file.name} (supported: {', '.join(_registry.extensions())})"
        )
    return analyzer.parse_file(file)


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="codeir_analyze",
            description=(
                "Convert a source file into its language-agnostic representation: "
                "definitions with scopes, references and documentation, plus unit metadata."
            ),
            inputSchema={
                "type": "object",
                "properties": {"path": _PATH_SCHEMA},
                "required": ["path"],
            },
        ),
        Tool(
            name="codeir_definitions",
            description="List the definitions of a source file, optionally filtered by kind.",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": _PATH_SCHEMA,
                    "kind": {
                        "type": "string",
                        "enum": [kind.value for kind in DefinitionKind],
                        "description": "Filter by definition kind (optional)",
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="codeir_documentation",
            description="Get the documentation of a source file and of each documented definition.",
            inputSchema={
                "type": "object",
                "properties": {"path": _PATH_SCHEMA},
                "required": ["path"],
            },
        ),
        Tool(
            name="codeir_languages",
            description="List the file extensions that can be analyzed.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "codeir_analyze":
            result = _handle_analyze(arguments["path"])
        elif name == "codeir_definitions":
            result = _handle_definitions(arguments["path"], arguments.get("kind"))
        elif name == "codeir_documentation":
            result = _handle_documentation(arguments["path"])
        elif name == "codeir_languages":
            result = _handle_languages()
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except (CodeIRError, KeyError, ValueError) as e:
        logger.debug("Tool %s failed: %s", name, e)
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


def _handle_analyze(path: str) -> dict[str, Any]:
    """Handle codeir_analyze tool."""
    return unit_to_dict(_analyze(path))


def _handle_definitions(path: str, kind: str | None) -> dict[str, Any]:
    """Handle codeir_definitions tool."""
    kind_filter = DefinitionKind(kind) if kind else None
    unit = _analyze(path)
    definitions = unit.definitions_of(kind_filter) if kind_filter else list(unit.definitions)
    return {
        "unit": unit.name,
        "results": [definition_to_dict(d) for d in definitions],
    }


def _handle_documentation(path: str) -> dict[str, Any]:
    """Handle codeir_documentation tool."""
    unit = _analyze(path)
    return {
        "unit": documentation_to_dict(unit.documentation),
        "definitions": [
            {
                "name": d.name,
                "kind": d.kind.value,
                "documentation": documentation_to_dict(d.documentation),
            }
            for d in unit.definitions
            if d.documentation is not None
        ],
    }


def _handle_languages() -> dict[str, Any]:
    """Handle codeir_languages tool."""
    return {"extensions": _registry.extensions()}


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
