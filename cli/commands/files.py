"""Script file commands."""

from pathlib import Path

import typer
from rich.tree import Tree

from listing import ListingCoordinator
from sources import (
    FileSystemContents,
    FileSystemSource,
    FolderEntry,
    SourceNotFoundError,
    SourceRegistry,
    count_all_files,
    parse_file_id_source,
)
from sources.naming import extract_title_from_content, generate_unique_script_name, make_name_unique

from cli.utils.config import SourcesConfig
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

# Create files command group
files_app = typer.Typer(
    name="files",
    help="List, read and edit scripts",
    rich_markup_mode="rich",
)


def _source_for_file(registry: SourceRegistry, file_id: str):
    source_id = parse_file_id_source(file_id)
    source = registry.get_source(source_id)
    if source is None:
        raise SourceNotFoundError(source_id)
    return source


@files_app.command(name="list")
def list_files(
    source_id: str | None = typer.Argument(
        None, help="Source ID (defaults to the configured default source)"
    ),
    format: OutputFormat = FormatOption,
):
    """List the files of a source."""
    source_id = source_id or SourcesConfig.load().default_source

    try:

        async def load(registry: SourceRegistry):
            source = registry.get_source(source_id)
            if source is None:
                return None, None
            coordinator = ListingCoordinator(registry, source_id)
            state = await coordinator.settle()
            coordinator.close()
            return source.name, state.files

        source_name, files = run_with_registry(load)
        if source_name is None:
            print_error(f"Source not found: {source_id}")
            raise typer.Exit(code=1)

        if not files and format == OutputFormat.TABLE:
            console.print(f"No files in {source_name}.", style="yellow")
            return

        output_list(
            files,
            format,
            title=f"{source_name} ({len(files)} files)",
            columns=[Column("Name", "cyan", no_wrap=True), Column("ID", "dim")],
            row=lambda f: [f.name, f.id],
        )

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error listing files: {e}")
        raise typer.Exit(code=1)


def _add_folder_branch(tree: Tree, folder: FolderEntry):
    branch = tree.add(f"📁 [bold]{folder.name}[/bold]")
    for subfolder in folder.subfolders:
        _add_folder_branch(branch, subfolder)
    for script in folder.files:
        branch.add(script.name)


@files_app.command(name="tree")
def show_tree(
    source_id: str = typer.Argument(..., help="Folder source ID"),
    format: OutputFormat = FormatOption,
):
    """Show the nested contents of a folder source."""
    try:

        async def load(registry: SourceRegistry):
            source = registry.get_source(source_id)
            if not isinstance(source, FileSystemSource):
                return None, None
            return source.name, await source.list_contents()

        source_name, contents = run_with_registry(load)
        if contents is None:
            print_error(f"Not a folder source: {source_id}")
            raise typer.Exit(code=1)

        if format == OutputFormat.JSON:
            print_json(contents)
            return

        tree = Tree(f"📂 [bold]{source_name}[/bold] ({count_all_files(contents)} files)")
        for folder in contents.folders:
            _add_folder_branch(tree, folder)
        for script in contents.files:
            tree.add(script.name)
        console.print(tree)

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error listing folder: {e}")
        raise typer.Exit(code=1)


@files_app.command(name="show")
def show_file(
    file_id: str = typer.Argument(..., help="File ID"),
    format: OutputFormat = FormatOption,
):
    """Print a file's content."""
    try:

        async def read(registry: SourceRegistry):
            source, content = await registry.get_file(file_id)
            return source.source_id, content

        source_id, content = run_with_registry(read)

        if format == OutputFormat.JSON:
            print_json({"id": file_id, "source_id": source_id, "content": content})
        else:
            typer.echo(content)

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error reading file: {e}")
        raise typer.Exit(code=1)


@files_app.command(name="new")
def new_file(
    name: str | None = typer.Option(None, "--name", "-n", help="Script name"),
    from_file: Path | None = typer.Option(
        None, "--from-file", help="Read initial content from a local file"
    ),
    source_id: str = typer.Option("my-scripts", "--source", "-s", help="Writable source ID"),
    format: OutputFormat = FormatOption,
):
    """Create a script. The name defaults to the content's first line."""
    try:
        content = from_file.read_text(encoding="utf-8") if from_file else ""

        async def create(registry: SourceRegistry):
            source = registry.get_source(source_id)
            if source is None:
                raise SourceNotFoundError(source_id)

            existing = [f.name for f in await source.list_files()]
            if name:
                base_name = name
            elif content.strip():
                base_name = extract_title_from_content(content)
            else:
                return await source.create_file(generate_unique_script_name(existing), content)
            return await source.create_file(make_name_unique(base_name, existing), content)

        script = run_with_registry(create)

        if format == OutputFormat.JSON:
            print_json(script)
        else:
            print_success(f"Created '{script.name}' ({script.id})")

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error creating script: {e}")
        raise typer.Exit(code=1)


@files_app.command(name="rename")
def rename_file(
    file_id: str = typer.Argument(..., help="File ID"),
    new_name: str = typer.Argument(..., help="New name"),
):
    """Rename a script."""
    try:

        async def rename(registry: SourceRegistry):
            source = _source_for_file(registry, file_id)
            await source.rename_file(file_id, new_name)

        run_with_registry(rename)
        print_success(f"Renamed {file_id} to '{new_name}'")

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error renaming script: {e}")
        raise typer.Exit(code=1)


@files_app.command(name="delete")
def delete_file(
    file_id: str = typer.Argument(..., help="File ID"),
    force: bool = typer.Option(False, "--force", help="Skip confirmation"),
):
    """Delete a script."""
    if not force:
        typer.confirm(f"Delete {file_id}?", abort=True)

    try:

        async def delete(registry: SourceRegistry):
            source = _source_for_file(registry, file_id)
            await source.delete_file(file_id)

        run_with_registry(delete)
        print_success(f"Deleted {file_id}")

    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Error deleting script: {e}")
        raise typer.Exit(code=1)
