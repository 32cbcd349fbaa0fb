from __future__ import annotations

from typing import Dict

from kubehop.config.configset import ConfigurationSet


def flags_from_config_set(cs: ConfigurationSet) -> Dict[str, str]:
    """
    Returns the flags of a configuration set that may be written to the
    history: every item with a value that is neither sensitive nor marked as
    ignored by the history.
    """
    flags: Dict[str, str] = {}
    for item in cs.get_all():
        if item.sensitive or item.history_ignore:
            continue
        if not item.has_value():
            continue
        flags[item.name] = item.value_string()

    return flags
