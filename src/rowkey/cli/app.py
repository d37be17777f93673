"""
Root Typer application for the rowkey CLI.

    rowkey inspect --key "id:int, name:string"
    rowkey encode --key "id:int, name:string" 345 "a/b"
    rowkey decode --key "id:int, name:string" "345/a_/b"
"""

from __future__ import annotations

import json
import sys

import typer
from rich.console import Console
from rich.table import Table

from rowkey.errors import RowKeyError
from rowkey.logging import configure_logging
from rowkey.settings import get_settings
from rowkey.unique_key import UniqueKey, UniqueKeyBuilder

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="rowkey",
    help="rowkey — encode and decode database doc ids.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

KeyOption = typer.Option(..., "--key", "-k", help="Unique key declaration, e.g. 'id:int, name:string'")
UrlOption = typer.Option(False, "--url", help="The single key column is the doc URL")
JsonOption = typer.Option(False, "--json", help="Output JSON")


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("rowkey")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"rowkey {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """rowkey CLI — inspect unique key declarations and doc ids."""
    # stdout carries only command output
    configure_logging(level=get_settings().log_level, stream=sys.stderr, cache_loggers=False)


def _fail(error: RowKeyError) -> typer.Exit:
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    return typer.Exit(code=1)


def _build(
    key: str,
    url: bool,
    content_columns: str = "",
    acl_columns: str = "",
) -> UniqueKey:
    try:
        return (
            UniqueKeyBuilder(key)
            .set_doc_id_is_url(url)
            .set_content_sql_columns(content_columns)
            .set_acl_sql_columns(acl_columns)
            .build()
        )
    except RowKeyError as e:
        raise _fail(e) from e


@app.command("inspect")
def inspect_key(
    key: str = KeyOption,
    url: bool = UrlOption,
    content_columns: str = typer.Option("", "--content-columns", help="Content query parameter columns"),
    acl_columns: str = typer.Option("", "--acl-columns", help="ACL query parameter columns"),
    as_json: bool = JsonOption,
) -> None:
    """Show the parsed unique key declaration."""
    unique_key = _build(key, url, content_columns, acl_columns)

    if as_json:
        console.print_json(
            json.dumps(
                {
                    "columns": [
                        {"name": c.name, "type": c.column_type.value} for c in unique_key.columns
                    ],
                    "doc_id_is_url": unique_key.doc_id_is_url,
                    "content_sql_columns": unique_key.content_sql_columns,
                    "acl_sql_columns": unique_key.acl_sql_columns,
                }
            )
        )
        return

    table = Table(title="Unique key")
    table.add_column("#", justify="right")
    table.add_column("Column")
    table.add_column("Type")
    for i, column in enumerate(unique_key.columns, start=1):
        table.add_row(str(i), column.name, column.column_type.value)
    console.print(table)
    console.print(f"[bold]Doc id is URL:[/bold] {unique_key.doc_id_is_url}")
    console.print(f"[bold]Content parameters:[/bold] {', '.join(unique_key.content_sql_columns)}")
    console.print(f"[bold]ACL parameters:[/bold] {', '.join(unique_key.acl_sql_columns)}")


@app.command("encode")
def encode(
    values: list[str] = typer.Argument(..., help="Canonical column values, in declared order"),
    key: str = KeyOption,
    url: bool = UrlOption,
) -> None:
    """Build the doc id for canonical column values."""
    unique_key = _build(key, url)
    try:
        doc_id = unique_key.encode_values(values)
    except RowKeyError as e:
        raise _fail(e) from e
    typer.echo(doc_id)


@app.command("decode")
def decode(
    doc_id: str = typer.Argument(..., help="Doc id to decode"),
    key: str = KeyOption,
    url: bool = UrlOption,
    as_json: bool = JsonOption,
) -> None:
    """Split a doc id into its column values and check that each one parses."""
    unique_key = _build(key, url)
    try:
        values = unique_key.decode(doc_id)
        for column, text in zip(unique_key.columns, values):
            column.column_type.parse(text, column.name)
    except RowKeyError as e:
        raise _fail(e) from e

    if as_json:
        console.print_json(json.dumps(dict(zip(unique_key.column_names, values))))
        return

    table = Table(title=doc_id)
    table.add_column("Column")
    table.add_column("Type")
    table.add_column("Value")
    for column, text in zip(unique_key.columns, values):
        table.add_row(column.name, column.column_type.value, repr(text))
    console.print(table)
