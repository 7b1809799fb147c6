"""CLI entry point for codeir."""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codeir.config import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENVVAR, setup_logging
from codeir.core.exceptions import CodeIRError
from codeir.core.models import CodeUnit, Documentation
from codeir.core.registry import AnalyzerRegistry
from codeir.core.serialize import documentation_to_dict, unit_to_dict
from codeir.languages import default_registry

app = typer.Typer(
    name="codeir",
    help="Language-agnostic code intermediate representation.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def get_registry() -> AnalyzerRegistry:
    """Registry with every bundled language."""
    return default_registry()


def analyze_path(registry: AnalyzerRegistry, path: Path, root: Path | None = None) -> CodeUnit:
    """Analyze one file, raising CodeIRError when it cannot be converted."""
    analyzer = registry.resolve(path, root)
    if analyzer is None:
        raise CodeIRError(f"Unsupported file type: {path.name}")
    return analyzer.parse_file(path)


def format_documentation(documentation: Documentation, indent: str = "") -> list[str]:
    """Render documentation as rich markup lines."""
    lines = []
    if documentation.description:
        lines.extend(f"{indent}{escape(line)}" for line in documentation.description.splitlines())
    for tag in documentation.tags:
        name = tag.attributes.get("name")
        label = f"@{tag.name} {name}" if name else f"@{tag.name}"
        lines.append(f"{indent}[yellow]{escape(label)}[/] {escape(tag.value)}".rstrip())
    return lines


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", envvar=LOG_LEVEL_ENVVAR, help="Logging level"),
    ] = DEFAULT_LOG_LEVEL,
) -> None:
    """Language-agnostic code intermediate representation."""
    try:
        setup_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


@app.command()
def analyze(
    paths: Annotated[list[Path], typer.Argument(help="Source files to analyze")],
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    root: Annotated[
        Path | None, typer.Option("--root", "-r", help="Source root for package names")
    ] = None,
) -> None:
    """Convert source files and list their definitions."""
    registry = get_registry()
    results: list[dict[str, object]] = []
    failed = False

    for path in paths:
        try:
            unit = analyze_path(registry, path, root)
        except CodeIRError as e:
            failed = True
            if output_json:
                results.append({"path": str(path), "error": str(e)})
            else:
                err_console.print(f"[red]Error:[/red] {escape(str(path))}: {escape(str(e))}")
            continue

        if output_json:
            results.append({"path": str(path), "unit": unit_to_dict(unit)})
            continue

        table = Table(title=f"{unit.name} [dim]({unit.metadata.get('packageName') or 'default package'})[/]")
        table.add_column("Kind", style="magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Scope")
        table.add_column("Lines", justify="right")
        table.add_column("Declared in", style="dim")
        for definition in unit.definitions:
            table.add_row(
                definition.kind.value,
                escape(definition.name),
                definition.scope.level.value,
                f"{definition.scope.start.line}-{definition.scope.end.line}",
                definition.metadata.get("declaringType") or "",
            )
        console.print(table)

    if output_json:
        print(json.dumps(results))

    if failed:
        raise typer.Exit(code=1)


@app.command()
def docs(
    path: Annotated[Path, typer.Argument(help="Source file")],
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the documentation of a file and of each definition in it."""
    try:
        unit = analyze_path(get_registry(), path)
    except CodeIRError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    documented = [d for d in unit.definitions if d.documentation is not None]

    if output_json:
        result = {
            "unit": documentation_to_dict(unit.documentation),
            "definitions": [
                {
                    "name": d.name,
                    "kind": d.kind.value,
                    "documentation": documentation_to_dict(d.documentation),
                }
                for d in documented
            ],
        }
        print(json.dumps(result))
        return

    if unit.documentation is not None:
        console.print(f"[bold]{unit.name}[/]")
        for line in format_documentation(unit.documentation, "  "):
            console.print(line)
    if not documented:
        console.print(f"[dim]No documented definitions in {unit.name}[/]")
        return

    for definition in documented:
        console.print(f"\n[bold cyan]{definition.name}[/] ({definition.kind.value})")
        for line in format_documentation(definition.documentation, "  "):
            console.print(line)


@app.command()
def languages(
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List the file extensions codeir can analyze."""
    extensions = get_registry().extensions()
    if output_json:
        print(json.dumps(extensions))
        return
    for extension in extensions:
        console.print(f".{extension}")


if __name__ == "__main__":
    app()
