from __future__ import annotations

from typing import Optional

from kubehop.config.app_config import AppConfiguration
from kubehop.config.configset import ConfigurationSet
from kubehop.config.item import ConfigItem, coerce_item_value
from kubehop.errors import InvalidConfigValueError
from kubehop.logger import logger


def _set_from_source(item: ConfigItem, raw: str, source: str) -> None:
    try:
        item.value = coerce_item_value(item, raw)
    except ValueError as e:
        raise InvalidConfigValueError(item.name, source, raw, str(e)) from e


def apply_to_config_set(
    cs: ConfigurationSet,
    app_config: Optional[AppConfiguration],
    provider: Optional[str] = None,
) -> None:
    """
    Fills the items of a configuration set that have no value yet from the
    persisted application configuration.

    A value configured for the given provider always wins over a global one.
    Items without a persisted value are left unset. No items are added to the
    set.

    Args:
        cs (ConfigurationSet): The set to fill in place.
        app_config (Optional[AppConfiguration]): The application configuration.
        provider (Optional[str]): The discovery provider the command runs for.

    Raises:
        InvalidConfigValueError: If a persisted value can't be coerced to the
        type of its item.
    """
    if app_config is None:
        return

    provider_values = app_config.providers.get(provider, {}) if provider else {}

    for item in cs.get_all():
        if item.has_value():
            continue

        if item.name in provider_values:
            logger.debug(f"Setting {item.name} from the {provider} provider config")
            _set_from_source(item, provider_values[item.name], "provider")
            continue

        if item.name in app_config.global_:
            logger.debug(f"Setting {item.name} from the global config")
            _set_from_source(item, app_config.global_[item.name], "global")


def apply_defaults(cs: ConfigurationSet) -> None:
    for item in cs.get_all():
        if not item.has_value() and item.default_value is not None:
            item.value = item.default_value
