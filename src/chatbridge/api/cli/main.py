"""chatbridge CLI entry point.

Operator commands for inspecting workspaces and their memory logs.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from chatbridge.application.factory import build_memory_store, build_workspace_manager
from chatbridge.core.domain.config_schema import BridgeConfig
from chatbridge.core.domain.errors import ChatbridgeError
from chatbridge.core.domain.memory import ResolvedMemory
from chatbridge.infrastructure.config import load_config
from chatbridge.infrastructure.logging import configure_logging

app = typer.Typer(
    name="chatbridge",
    help="chatbridge - workspace and memory administration",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to a YAML config file")


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """chatbridge admin CLI."""
    ctx.obj = {"debug": debug}


def _load(ctx: typer.Context, config_path: Optional[Path]) -> BridgeConfig:
    try:
        config = load_config(config_path)
    except ChatbridgeError as exc:
        console.print(f"[red]Error:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    debug = (ctx.obj or {}).get("debug", False)
    configure_logging(
        "DEBUG" if debug else config.logging.level,
        json_output=config.logging.json_output,
    )
    return config


def _render_memories(title: str, memories: list[ResolvedMemory]) -> None:
    if not memories:
        console.print("[yellow]No memories found.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Importance", style="magenta")
    table.add_column("Visibility")
    table.add_column("Enabled")
    table.add_column("Content", style="white")
    for memory in memories:
        table.add_row(
            memory.id,
            memory.importance.value,
            memory.visibility.value,
            "yes" if memory.enabled else "[red]no[/red]",
            memory.content,
        )
    console.print(table)


@app.command("workspaces")
def list_workspaces(
    ctx: typer.Context,
    platform: Optional[str] = typer.Option(None, "--platform", "-p", help="Filter by platform"),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """List workspace keys found on disk."""
    config = _load(ctx, config_path)
    manager = build_workspace_manager(config)

    keys = asyncio.run(manager.list_workspaces(platform))
    if not keys:
        console.print("[yellow]No workspaces found.[/yellow]")
        return

    table = Table(title=f"Workspaces ({manager.workspaces_root})")
    table.add_column("Key", style="cyan")
    for key in keys:
        table.add_row(key)
    console.print(table)


@app.command("memories")
def list_memories(
    ctx: typer.Context,
    workspace_key: str = typer.Argument(..., help="Workspace key: platform/user/channel"),
    dm: bool = typer.Option(False, "--dm", help="Include the private memory log"),
    show_all: bool = typer.Option(False, "--all", "-a", help="Include disabled memories"),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Show the resolved memories of a workspace."""
    config = _load(ctx, config_path)
    manager = build_workspace_manager(config)
    store = build_memory_store(config, manager)

    async def _list() -> list[ResolvedMemory]:
        workspace = await manager.open_workspace(workspace_key, is_dm=dm)
        return await store.list_memories(workspace, include_disabled=show_all)

    try:
        memories = asyncio.run(_list())
    except ChatbridgeError as exc:
        console.print(f"[red]Error:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    _render_memories(f"Memories of {workspace_key}", memories)


@app.command("search")
def search(
    ctx: typer.Context,
    workspace_key: str = typer.Argument(..., help="Workspace key: platform/user/channel"),
    keywords: List[str] = typer.Argument(..., help="Keywords (any may match)"),
    dm: bool = typer.Option(False, "--dm", help="Include the private memory log"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum results"),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Keyword search over a workspace's enabled memories."""
    config = _load(ctx, config_path)
    manager = build_workspace_manager(config)
    store = build_memory_store(config, manager)

    async def _search() -> list[ResolvedMemory]:
        workspace = await manager.open_workspace(workspace_key, is_dm=dm)
        return await store.search_memories(workspace, keywords, max_results=limit)

    try:
        memories = asyncio.run(_search())
    except ChatbridgeError as exc:
        console.print(f"[red]Error:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    _render_memories(f"Search: {' '.join(keywords)}", memories)


@app.command()
def version():
    """Show chatbridge version."""
    from chatbridge import __version__

    console.print(f"[bold blue]Version:[/bold blue] [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
