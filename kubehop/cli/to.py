from __future__ import annotations

from typing import Optional

import typer

from kubehop.cli.utils import create_app, get_registry, handle_errors
from kubehop.history.filter import parse_key_values
from kubehop.logger import logger


@handle_errors
def to(
    ctx: typer.Context,
    target: str = typer.Argument(
        "",
        help="History entry id or alias, '-' or 'LAST' for the last used "
        "connection, 'LAST~N' for the Nth last one. Pick interactively if empty.",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None, "--kubeconfig", "-k", help="Location of the kubeconfig to use."
    ),
    set_current: bool = typer.Option(
        True,
        "--set-current/--no-set-current",
        help="Sets the current context in the kubeconfig.",
    ),
    set_flags: str = typer.Option(
        "",
        "--set",
        help="Flags overriding the ones of the history entry, e.g. region=eu-west-1.",
    ),
    config: Optional[str] = typer.Option(
        None, "--config", help="Configuration file for application wide defaults."
    ),
    history_location: Optional[str] = typer.Option(
        None, "--history-location", help="Location of where the history is stored."
    ),
    max_history: Optional[int] = typer.Option(
        None, "--max-history", help="Maximum number of history items to keep."
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Explicitly disable interactivity."
    ),
) -> None:
    """
    Connects to a cluster using a previous connection from the history.
    """
    app = create_app(get_registry(ctx), config, history_location, max_history, no_input)
    entry_id = app.connect_to(
        target,
        kubeconfig=kubeconfig,
        set_current=set_current,
        overrides=parse_key_values(set_flags),
    )
    if entry_id:
        logger.debug(f"Connected using history entry {entry_id}")


@handle_errors
def renew(
    ctx: typer.Context,
    kubeconfig: Optional[str] = typer.Option(
        None, "--kubeconfig", "-k", help="Location of the kubeconfig to use."
    ),
    config: Optional[str] = typer.Option(
        None, "--config", help="Configuration file for application wide defaults."
    ),
    history_location: Optional[str] = typer.Option(
        None, "--history-location", help="Location of where the history is stored."
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Explicitly disable interactivity."
    ),
) -> None:
    """
    Reconnects to the cluster of the current kubeconfig context, refreshing
    its credentials.
    """
    app = create_app(get_registry(ctx), config, history_location, no_input=no_input)
    app.renew(kubeconfig)
