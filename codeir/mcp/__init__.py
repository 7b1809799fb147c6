"""
MCP server for codeir.

Exposes code IR conversion to LLMs via the Model Context Protocol.

Tools:
    - codeir_analyze: Convert a file into its full code unit
    - codeir_definitions: List the definitions of a file, optionally by kind
    - codeir_documentation: Get file and definition documentation
    - codeir_languages: List supported file extensions

Usage:
    Run: codeir-mcp
"""

import asyncio

from codeir.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
