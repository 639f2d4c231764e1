"""Rich output helpers shared by the script-sources commands."""

import json
from collections.abc import Callable, Iterable
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

import typer
from rich.console import Console
from rich.table import Table

console = Console()


class OutputFormat(str, Enum):
    """Output format options for CLI commands."""

    TABLE = "table"
    JSON = "json"


FormatOption = typer.Option(
    OutputFormat.TABLE,
    "--format",
    "-f",
    help="Output format: table (default) or json",
    case_sensitive=False,
)


class Column(NamedTuple):
    """A table column: header, rich style, and whether to keep it on one line."""

    header: str
    style: str | None = None
    no_wrap: bool = False


def _encode(obj: Any) -> Any:
    # Fallback for json.dumps; str enums never reach here
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def print_json(data: Any):
    """Print data as indented JSON.

    Written with typer.echo rather than the rich console so long values are
    never wrapped and the output stays machine readable.

    Args:
        data: Dataclasses, lists and dicts of them
    """
    typer.echo(json.dumps(data, default=_encode, indent=2))


def output_list(
    items: Iterable[Any],
    format: OutputFormat,
    title: str,
    columns: list[Column],
    row: Callable[[Any], list[str]],
):
    """Print items as a rich table or as a JSON array.

    In JSON mode every item is serialized as-is, so commands pass
    dataclass records rather than prebuilt dicts.

    Args:
        items: Records to output
        format: Output format
        title: Table title
        columns: Table columns
        row: Builds the cells of one table row
    """
    items = list(items)
    if format == OutputFormat.JSON:
        print_json(items)
        return

    table = Table(title=title)
    for column in columns:
        table.add_column(column.header, style=column.style, no_wrap=column.no_wrap)
    for item in items:
        table.add_row(*row(item))
    console.print(table)


def _status(icon: str, message: str, style: str):
    console.print(f"{icon} {message}", style=style)


def print_error(message: str):
    _status("❌", message, "bold red")


def print_success(message: str):
    _status("✅", message, "bold green")
