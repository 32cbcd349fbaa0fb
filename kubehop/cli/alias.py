from __future__ import annotations

from typing import Optional

import typer

from kubehop.cli.utils import create_app, get_registry, handle_errors, print_output

alias_app = typer.Typer()

_history_location_option = typer.Option(
    None, "--history-location", help="Location of where the history is stored."
)


@alias_app.command("ls")
@handle_errors
def list_aliases(
    ctx: typer.Context,
    output: str = typer.Option(
        "table", "--output", "-o", help="Output format: table, yaml or json."
    ),
    history_location: Optional[str] = _history_location_option,
) -> None:
    """
    Lists the aliases of the connection history.
    """
    app = create_app(get_registry(ctx), history_location=history_location)
    aliases = app.alias_list()
    print_output(
        aliases, output, table=[[alias] for alias in aliases], headers=["Alias"]
    )


@alias_app.command("add")
@handle_errors
def add_alias(
    ctx: typer.Context,
    entry_id: str = typer.Option(
        ..., "--id", help="Id of the history entry to add the alias to."
    ),
    alias: str = typer.Option(..., "--alias", "-a", help="The alias."),
    history_location: Optional[str] = _history_location_option,
) -> None:
    """
    Adds an alias to a history entry.
    """
    app = create_app(get_registry(ctx), history_location=history_location)
    app.alias_add(entry_id, alias)


@alias_app.command("rm")
@handle_errors
def remove_alias(
    ctx: typer.Context,
    entry_id: str = typer.Option(
        "", "--id", help="Id of the history entry to remove the alias from."
    ),
    alias: str = typer.Option("", "--alias", "-a", help="The alias to remove."),
    remove_all: bool = typer.Option(False, "--all", help="Remove all aliases."),
    history_location: Optional[str] = _history_location_option,
) -> None:
    """
    Removes aliases from history entries. The entries are kept.
    """
    app = create_app(get_registry(ctx), history_location=history_location)
    app.alias_remove(entry_id, alias, remove_all)
