"""Source management commands."""

from pathlib import Path

import typer

from listing import SourceCatalog
from sources import MY_SCRIPTS_ID, SourceRegistry

from cli.utils.formatting import (
    Column,
    FormatOption,
    OutputFormat,
    console,
    output_list,
    print_error,
    print_json,
    print_success,
)
from cli.utils.runtime import run_with_registry

# Create sources command group
sources_app = typer.Typer(
    name="sources",
    help="Manage script sources",
    rich_markup_mode="rich",
)


@sources_app.callback(invoke_without_command=True)
def sources_callback(ctx: typer.Context):
    """Sources command group."""
    if ctx.invoked_subcommand is None:
        # Default to list command
        list_sources(format=OutputFormat.TABLE)


@sources_app.command(name="list")
def list_sources(format: OutputFormat = FormatOption):
    """List registered sources."""
    try:

        async def load(registry: SourceRegistry):
            catalog = SourceCatalog(registry)
            await catalog.initialize()
            return catalog.sources

        infos = run_with_registry(load)

        def build_row(info):
            return [
                info.id,
                info.name,
                str(getattr(info.type, "value", info.type)),
                "yes" if info.readonly else "no",
                "yes" if info.needs_permission else "no",
            ]

        output_list(
            infos,
            format,
            title=f"Sources ({len(infos)})",
            columns=[
                Column("ID", "dim", no_wrap=True),
                Column("Name", "cyan", no_wrap=True),
                Column("Type", "magenta"),
                Column("Read-only", "yellow"),
                Column("Needs permission", "red"),
            ],
            row=build_row,
        )

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error listing sources: {e}")
        raise typer.Exit(code=1)


@sources_app.command(name="add")
def add_source(
    path: Path = typer.Argument(..., help="Directory containing Markdown scripts"),
    format: OutputFormat = FormatOption,
):
    """Add a local folder as a read-only source."""
    try:
        folder = path.expanduser().resolve()

        async def add(registry: SourceRegistry):
            catalog = SourceCatalog(registry)
            return await catalog.add_folder(folder)

        info = run_with_registry(add)

        if format == OutputFormat.JSON:
            print_json(info)
        else:
            print_success(f"Added folder source '{info.name}' ({info.id})")

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error adding folder: {e}")
        raise typer.Exit(code=1)


@sources_app.command(name="remove")
def remove_source(
    source_id: str = typer.Argument(..., help="Source ID"),
):
    """Forget a folder source."""
    if source_id == MY_SCRIPTS_ID:
        print_error("The built-in script library cannot be removed")
        raise typer.Exit(code=1)

    try:

        async def remove(registry: SourceRegistry) -> bool:
            if not registry.is_registered(source_id):
                return False
            catalog = SourceCatalog(registry)
            await catalog.remove_folder(source_id)
            return True

        if not run_with_registry(remove):
            print_error(f"Source not found: {source_id}")
            raise typer.Exit(code=1)

        print_success(f"Removed source {source_id}")
        console.print("Files in the folder were not touched.", style="dim")

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error removing source: {e}")
        raise typer.Exit(code=1)
