from __future__ import annotations

from typing import Any, Dict, List, Optional

import click
from click.core import ParameterSource

from kubehop.app.app import build_store, build_use_config
from kubehop.app.items import (
    CONFIG_PATH_CONFIG_ITEM,
    HISTORY_LOCATION_CONFIG_ITEM,
    NO_INPUT_CONFIG_ITEM,
    NON_INTERACTIVE_CONFIG_ITEM,
    UseInput,
)
from kubehop.cli.utils import create_app, handle_errors
from kubehop.config.binder import unmarshal
from kubehop.config.configset import ConfigurationSet
from kubehop.config.item import ConfigItem, ItemType
from kubehop.constants import PROJECT_NAME
from kubehop.logger import logger
from kubehop.providers.registry import ProviderRegistry

_EXPLICIT_SOURCES = (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)

_CLICK_TYPES = {ItemType.STRING: click.STRING, ItemType.INT: click.INT}


def param_name(item_name: str) -> str:
    return item_name.replace("-", "_")


def env_var(item_name: str) -> str:
    """
    The environment variable that can set a config item.

    Example:
        >>> env_var("max-history")
        'KUBEHOP_MAX_HISTORY'
    """
    return f"{PROJECT_NAME.upper()}_{param_name(item_name).upper()}"


def option_for_item(item: ConfigItem) -> click.Option:
    """
    Builds the command line option of a config item.

    Bool items that default to true become `--name/--no-name` flags, other
    bool items plain flags. Values are only taken from the command line or
    the environment, so only explicitly set options are used.
    """
    decls = [param_name(item.name)]
    if item.type == ItemType.BOOL and item.default_value:
        decls.append(f"--{item.name}/--no-{item.name}")
    else:
        decls.append(f"--{item.name}")
    if item.shorthand:
        decls.append(f"-{item.shorthand}")

    help_text = item.description
    if item.deprecated:
        help_text = f"{help_text} (deprecated, {item.deprecated_message})"

    if item.type == ItemType.BOOL:
        return click.Option(
            decls,
            is_flag=True,
            default=bool(item.default_value),
            envvar=env_var(item.name),
            help=help_text,
            hidden=item.hidden,
        )

    return click.Option(
        decls,
        type=_CLICK_TYPES[item.type],
        default=None,
        envvar=env_var(item.name),
        help=help_text,
        hidden=item.hidden,
    )


def options_for_config_set(cs: ConfigurationSet) -> List[click.Option]:
    items = sorted(cs.get_all(), key=lambda i: i.name)
    return [option_for_item(item) for item in items]


def _epilog(usage_example: str) -> str:
    # \b keeps click from rewrapping the example paragraphs
    paragraphs = [p for p in usage_example.strip("\n").split("\n\n") if p.strip()]
    return "\n\n".join(f"\b\n{p}" for p in paragraphs)


def explicit_values(ctx: click.Context, cs: ConfigurationSet) -> Dict[str, Any]:
    """
    Collects the values of the options that were set on the command line or
    through the environment, keyed by config item name.
    """
    values: Dict[str, Any] = {}
    for item in cs.get_all():
        name = param_name(item.name)
        if ctx.get_parameter_source(name) in _EXPLICIT_SOURCES:
            values[item.name] = ctx.params[name]
    return values


def run_use(
    registry: ProviderRegistry,
    discovery: str,
    identity: str,
    explicit: Dict[str, Any],
) -> Optional[str]:
    """
    Runs the use command for a provider pair with the explicitly set values.

    Args:
        registry (ProviderRegistry): The available providers.
        discovery (str): The discovery provider name.
        identity (str): The identity provider name.
        explicit (Dict[str, Any]): Values set on the command line.

    Returns:
        Optional[str]: The id of the history entry of the connection.
    """
    cs = build_use_config(registry, discovery, identity)
    for name, value in explicit.items():
        item = cs.get(name)
        if item is None:
            logger.debug(f"--{name} is not used by the {identity} identity provider")
            continue
        if item.deprecated:
            logger.warning(f"--{name} is deprecated, {item.deprecated_message}")
        item.value = value

    no_input = bool(
        explicit.get(NO_INPUT_CONFIG_ITEM) or explicit.get(NON_INTERACTIVE_CONFIG_ITEM)
    )
    app = create_app(
        registry,
        config_file=cs.value_string(CONFIG_PATH_CONFIG_ITEM),
        history_location=cs.value_string(HISTORY_LOCATION_CONFIG_ITEM),
        no_input=no_input,
    )
    app.resolve_config(cs, discovery)

    params = unmarshal(cs, UseInput)
    params.discovery_provider = discovery
    params.identity_provider = identity
    app.store = build_store(params.location, params.max_items)

    return app.use(params, cs)


def _provider_command(registry: ProviderRegistry, discovery: str) -> click.Command:
    discovery_cls = registry.get_discovery_class(discovery)
    identities = [
        name
        for name in discovery_cls.supported_identity_providers
        if name in registry.identity_names()
    ]

    # Options of every supported identity provider, the chosen one is only
    # known once the command line is parsed.
    shape = ConfigurationSet()
    for identity in identities:
        shape.merge(build_use_config(registry, discovery, identity))

    params: List[click.Parameter] = [
        click.Option(
            ["idp", "--idp"],
            type=click.Choice(identities),
            default=identities[0] if identities else None,
            show_default=True,
            help="Identity provider to use.",
        )
    ]
    params.extend(options_for_config_set(shape))

    @click.pass_context
    @handle_errors
    def callback(ctx: click.Context, idp: str, **kwargs: Any) -> None:
        run_use(registry, discovery, idp, explicit_values(ctx, shape))

    return click.Command(
        discovery,
        params=params,
        callback=callback,
        help=f"Connect to a cluster discovered by the {discovery} provider.",
        epilog=_epilog(discovery_cls.usage_example),
        context_settings={"help_option_names": ["-h", "--help"]},
    )


def build_use_command(registry: ProviderRegistry) -> click.Group:
    """
    Builds the use command with a subcommand per registered discovery provider.
    The options of each subcommand are generated from its configuration set.
    """
    group = click.Group(
        "use",
        help="Connect to a Kubernetes cluster.",
        context_settings={"help_option_names": ["-h", "--help"]},
    )
    for discovery in registry.discovery_names():
        group.add_command(_provider_command(registry, discovery))
    return group
