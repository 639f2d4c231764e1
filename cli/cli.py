"""script-sources CLI - Main entry point."""

import logging

import typer

from cli.commands.files import files_app
from cli.commands.sources import sources_app
from cli.utils.config import SourcesConfig

# Create main Typer app
app = typer.Typer(
    name="script-sources",
    help="Browse and edit scripts across storage sources",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(sources_app, name="sources")
app.add_typer(files_app, name="files")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """script-sources CLI for listing, reading and editing scripts."""
    verbose = verbose or SourcesConfig.load().verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
