from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

import click
import typer

from kubehop.config.app_config import AppConfiguration
from kubehop.config.configset import ConfigurationSet
from kubehop.config.item import ConfigItem, ItemType
from kubehop.constants import LIST_PREFIX
from kubehop.errors import KubehopError, RequiredItemMissingError


def choose(message: str, options: Sequence[Tuple[str, Any]]) -> Any:
    """
    Asks the user to pick one of the options.

    Args:
        message (str): The question to show.
        options (Sequence[Tuple[str, Any]]): Pairs of display name and value.

    Returns:
        Any: The value of the chosen option.
    """
    if not options:
        raise KubehopError(f"No options to choose from: {message}")

    for i, (name, _) in enumerate(options, start=1):
        typer.echo(f"  {i}) {name}")

    index = typer.prompt(message, type=click.IntRange(1, len(options)))
    return options[index - 1][1]


def confirm(message: str, default: bool = False) -> bool:
    return typer.confirm(message, default=default)


def ask(message: str, sensitive: bool = False) -> str:
    return typer.prompt(message, hide_input=sensitive)


def _list_options(
    name: str, app_config: Optional[AppConfiguration]
) -> List[Tuple[str, str]]:
    list_name = name[len(LIST_PREFIX) :]
    if app_config is None or list_name not in app_config.lists:
        raise KubehopError(f"List '{list_name}' not found in the configuration")
    return [(option.name, option.value) for option in app_config.lists[list_name]]


def _has_default(item: ConfigItem) -> bool:
    return item.default_value is not None and item.default_value != ""


def _prompt_for(item: ConfigItem) -> Any:
    message = item.resolution_prompt or item.description or item.name
    if item.type == ItemType.BOOL:
        return typer.confirm(message, default=bool(item.default_value))
    if item.type == ItemType.INT:
        return typer.prompt(message, type=int)
    return ask(message, sensitive=item.sensitive)


def resolve_interactively(
    cs: ConfigurationSet,
    app_config: Optional[AppConfiguration] = None,
    interactive: bool = True,
) -> None:
    """
    Fills the config items that still need a value by asking the user.

    Items whose value references a list of the application configuration are
    resolved by choosing from that list. Required items without a value are
    resolved in priority order, using the resolver registered for the item
    when there is one. Required items with a default are left for the
    defaults.

    Args:
        cs (ConfigurationSet): The set to fill in place.
        app_config (Optional[AppConfiguration]): The application configuration
            holding the named lists.
        interactive (bool): When False no prompts are shown and a missing
            required item is an error.

    Raises:
        RequiredItemMissingError: If a required item has no value and can't be
        resolved.
    """
    for item in cs.get_all():
        if not cs.value_is_list(item.name):
            continue
        if not interactive:
            raise RequiredItemMissingError(item.name)
        options = _list_options(item.value, app_config)
        item.value = choose(item.resolution_prompt or f"Select {item.name}", options)

    pending = sorted(
        (
            item
            for item in cs.get_all()
            if item.required
            and not cs.exists_with_value(item.name)
            and not _has_default(item)
        ),
        key=lambda item: item.priority,
    )

    for item in pending:
        if cs.exists_with_value(item.name):
            continue
        if not interactive:
            raise RequiredItemMissingError(item.name)

        resolver = cs.get_resolver(item.name)
        if resolver is not None:
            resolver(item.name, cs)
        else:
            item.value = _prompt_for(item)

        if not cs.exists_with_value(item.name):
            raise RequiredItemMissingError(item.name)
