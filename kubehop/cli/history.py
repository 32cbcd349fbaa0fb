from __future__ import annotations

from typing import List, Optional

import typer

from kubehop.cli.utils import create_app, get_registry, handle_errors, print_output
from kubehop.history.entry import TABLE_HEADERS
from kubehop.history.filter import parse_key_values
from kubehop.logger import logger

history_app = typer.Typer()


@handle_errors
def ls(
    ctx: typer.Context,
    filter_text: str = typer.Option(
        "",
        "--filter",
        help="Filter the entries, e.g. alias=dev*,region=eu-west-1. Keys other "
        "than alias, cluster-provider, id, identity-provider, kubeconfig and "
        "provider-id are matched against the entry's flags.",
    ),
    output: str = typer.Option(
        "table", "--output", "-o", help="Output format: table, yaml or json."
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        "-k",
        help="Kubeconfig used to mark the current connection.",
    ),
    history_location: Optional[str] = typer.Option(
        None, "--history-location", help="Location of where the history is stored."
    ),
) -> None:
    """
    Lists the connection history, most recently used first.
    """
    app = create_app(get_registry(ctx), history_location=history_location)
    entries = app.query_history(parse_key_values(filter_text))

    print_output(
        entries.model_dump(mode="json", by_alias=True, exclude_none=True),
        output,
        table=entries.to_table(app.current_entry_id(kubeconfig) or ""),
        headers=TABLE_HEADERS,
    )


@history_app.command("import")
@handle_errors
def import_history(
    ctx: typer.Context,
    file: str = typer.Option(..., "--file", "-f", help="The history file to import."),
    filter_text: str = typer.Option(
        "", "--filter", help="Only import the matching entries, e.g. alias=dev*."
    ),
    set_flags: str = typer.Option(
        "", "--set", help="Flags to set on every imported entry, e.g. region=eu-west-1."
    ),
    clean: bool = typer.Option(
        False, "--clean", help="Delete the existing history before importing."
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Replace existing entries with the same alias."
    ),
    history_location: Optional[str] = typer.Option(
        None, "--history-location", help="Location of where the history is stored."
    ),
) -> None:
    """
    Imports history entries from a file.
    """
    app = create_app(get_registry(ctx), history_location=history_location)
    app.history_import(file, filter_text, set_flags, clean, overwrite)


@history_app.command("export")
@handle_errors
def export_history(
    ctx: typer.Context,
    file: str = typer.Option(..., "--file", "-f", help="The file to export to."),
    filter_text: str = typer.Option(
        "", "--filter", help="Only export the matching entries, e.g. alias=dev*."
    ),
    set_flags: str = typer.Option(
        "", "--set", help="Flags to set on every exported entry, e.g. region=eu-west-1."
    ),
    history_location: Optional[str] = typer.Option(
        None, "--history-location", help="Location of where the history is stored."
    ),
) -> None:
    """
    Exports history entries to a file.
    """
    app = create_app(get_registry(ctx), history_location=history_location)
    app.history_export(file, filter_text, set_flags)


@history_app.command("rm")
@handle_errors
def remove_history(
    ctx: typer.Context,
    ids: Optional[List[str]] = typer.Argument(None, help="Ids of the entries."),
    remove_all: bool = typer.Option(False, "--all", help="Remove all entries."),
    filter_text: str = typer.Option(
        "", "--filter", help="Remove the matching entries, e.g. alias=dev*."
    ),
    history_location: Optional[str] = typer.Option(
        None, "--history-location", help="Location of where the history is stored."
    ),
) -> None:
    """
    Removes entries from the connection history.
    """
    if not ids and not remove_all and not filter_text:
        logger.error("Specify entry ids, --filter or --all.")
        raise typer.Exit(1)

    app = create_app(get_registry(ctx), history_location=history_location)
    app.history_remove(ids, remove_all, filter_text)
