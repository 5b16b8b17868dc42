"""Command line for driving the Qodo plugin outside a host."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from qodo_bridge.bootstrap import create_plugin_host
from qodo_bridge.errors import ToolNotFoundError
from qodo_bridge.models import get_all_models

app = typer.Typer(name="qodo-bridge", help="Run Qodo plugin tools from the command line", add_completion=False)
console = Console()


def parse_arguments(pairs: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into tool arguments; JSON values are decoded."""

    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}")
        try:
            arguments[key] = json.loads(raw)
        except json.JSONDecodeError:
            arguments[key] = raw
    return arguments


@app.command("tools")
def list_tools() -> None:
    """Show registered tools."""

    host = create_plugin_host()
    table = Table("name", "description")
    for descriptor in host.registry.descriptors():
        table.add_row(descriptor.name, descriptor.description)
    console.print(table)


@app.command("describe")
def describe_tool(name: str = typer.Argument(..., help="Tool name")) -> None:
    """Show one tool's argument schema."""

    host = create_plugin_host()
    try:
        typer.echo(host.registry.detail(name))
    except ToolNotFoundError:
        typer.echo(f"unknown tool: {name}", err=True)
        raise typer.Exit(code=1) from None


@app.command("call")
def call_tool(
    name: str = typer.Argument(..., help="Tool name"),
    arg: list[str] = typer.Option([], "--arg", "-a", help="Tool argument as key=value"),  # noqa: B008
) -> None:
    """Run one tool and print its output."""

    host = create_plugin_host()
    arguments = parse_arguments(arg)
    try:
        output = asyncio.run(host.call_tool(name, **arguments))
    except ToolNotFoundError:
        typer.echo(f"unknown tool: {name}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(output)


@app.command("models")
def list_models(provider: str | None = typer.Option(None, "--provider", "-p", help="Provider tag")) -> None:
    """Show the model catalog."""

    table = Table("id", "provider", "context", "output", "variants")
    for model in get_all_models():
        if provider is not None and model.provider != provider:
            continue
        table.add_row(
            model.id,
            model.provider,
            str(model.context_window),
            str(model.output_limit),
            ", ".join(model.variants) or "default",
        )
    console.print(table)


@app.command("hooks")
def list_hooks() -> None:
    """Show hook implementation mapping."""

    report = create_plugin_host().hook_report()
    if not report:
        typer.echo("(no hook implementations)")
        return
    for hook_name, plugins in report.items():
        typer.echo(f"{hook_name}: {', '.join(plugins)}")


@app.command("complete")
def complete(prefix: str = typer.Argument("", help="Text typed so far")) -> None:
    """Print autocomplete suggestions, one per line."""

    for suggestion in asyncio.run(create_plugin_host().complete(prefix)):
        typer.echo(suggestion)
