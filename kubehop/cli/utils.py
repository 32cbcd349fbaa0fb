from __future__ import annotations

import functools
import json
import sys
from typing import Any, List, Optional

import requests
import typer
from tabulate import tabulate

from kubehop.app.app import App, build_store
from kubehop.app.items import (
    HISTORY_LOCATION_CONFIG_ITEM,
    MAX_HISTORY_CONFIG_ITEM,
    HistoryConfig,
    add_history_config_items,
)
from kubehop.config.app_config import AppConfigurationFile
from kubehop.config.binder import unmarshal
from kubehop.config.configset import ConfigurationSet
from kubehop.config.resolve import apply_defaults, apply_to_config_set
from kubehop.errors import KubehopError
from kubehop.logger import logger
from kubehop.providers.registry import ProviderRegistry, build_registry
from kubehop.utils import to_yaml

OUTPUT_FORMATS = ["table", "yaml", "json"]


def handle_errors(func: Any) -> Any:
    """
    Decorator that turns kubehop errors raised by a command into an error
    message and a non-zero exit code.

    Args:
        func (Any): The command to decorate.

    Returns:
        Any: The decorated command.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (KubehopError, ValueError, OSError, requests.RequestException) as e:
            logger.error(str(e))
            raise typer.Exit(1)

    return wrapper


def get_registry(ctx: Optional[typer.Context]) -> ProviderRegistry:
    if ctx is not None and isinstance(ctx.obj, ProviderRegistry):
        return ctx.obj
    return build_registry()


def is_interactive(no_input: bool = False) -> bool:
    return not no_input and sys.stdin.isatty()


def create_app(
    registry: ProviderRegistry,
    config_file: Optional[str] = None,
    history_location: Optional[str] = None,
    max_history: Optional[int] = None,
    no_input: bool = False,
) -> App:
    """
    Creates the App for a command from its common options.

    The history location and size fall back to the application configuration
    when not given, so every command uses the same history as `use`.

    Args:
        registry (ProviderRegistry): The available providers.
        config_file (Optional[str]): The application configuration file.
        history_location (Optional[str]): The history file.
        max_history (Optional[int]): The maximum number of history entries.
        no_input (bool): Disable interactive prompts.

    Returns:
        App: The app.
    """
    app_config_file = AppConfigurationFile(config_file or None)

    cs = ConfigurationSet()
    add_history_config_items(cs)
    if history_location:
        cs.set_value(HISTORY_LOCATION_CONFIG_ITEM, history_location)
    if max_history is not None:
        cs.set_value(MAX_HISTORY_CONFIG_ITEM, max_history)
    apply_to_config_set(cs, app_config_file.get())
    apply_defaults(cs)
    params = unmarshal(cs, HistoryConfig)

    return App(
        registry,
        build_store(params.location or None, params.max_items),
        app_config_file,
        interactive=is_interactive(no_input),
    )


def validate_output(output: str) -> str:
    if output not in OUTPUT_FORMATS:
        logger.error(
            f"Invalid output format '{output}', use one of {', '.join(OUTPUT_FORMATS)}."
        )
        raise typer.Exit(1)
    return output


def print_output(
    data: Any,
    output: str,
    table: Optional[List[List[str]]] = None,
    headers: Optional[List[str]] = None,
) -> None:
    """
    Prints data in the requested output format.

    Args:
        data (Any): JSON serializable data for the yaml and json formats.
        output (str): One of table, yaml or json.
        table (Optional[List[List[str]]]): The rows for the table format.
        headers (Optional[List[str]]): The headers for the table format.
    """
    validate_output(output)

    if output == "table":
        logger.info(tabulate(table or [], headers=headers or []))
    elif output == "yaml":
        typer.echo(to_yaml(data), nl=False)
    else:
        typer.echo(json.dumps(data, indent=2))
