from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from kubehop.config.configset import ConfigurationSet
from kubehop.constants import (
    ALIAS_CONFIG_ITEM,
    CLUSTER_ID_CONFIG_ITEM,
    MAX_HISTORY_ITEMS,
)

CONFIG_PATH_CONFIG_ITEM = "config"
NO_INPUT_CONFIG_ITEM = "no-input"
NON_INTERACTIVE_CONFIG_ITEM = "non-interactive"
HISTORY_LOCATION_CONFIG_ITEM = "history-location"
MAX_HISTORY_CONFIG_ITEM = "max-history"
NO_HISTORY_CONFIG_ITEM = "no-history"
ENTRY_ID_CONFIG_ITEM = "entry-id"
KUBECONFIG_CONFIG_ITEM = "kubeconfig"
NAMESPACE_CONFIG_ITEM = "namespace"
SET_CURRENT_CONFIG_ITEM = "set-current"


def add_common_config_items(cs: ConfigurationSet) -> None:
    cs.add_string(
        CONFIG_PATH_CONFIG_ITEM,
        "",
        'Configuration file for application wide defaults. (default "$HOME/.kubehop/config.yaml")',
    )
    cs.add_bool(NO_INPUT_CONFIG_ITEM, False, "Explicitly disable interactivity")
    cs.add_bool(
        NON_INTERACTIVE_CONFIG_ITEM, False, "Run without interactive flag resolution"
    )
    cs.set_history_ignore(CONFIG_PATH_CONFIG_ITEM)
    cs.set_history_ignore(NO_INPUT_CONFIG_ITEM)
    cs.set_history_ignore(NON_INTERACTIVE_CONFIG_ITEM)
    cs.set_deprecated(NON_INTERACTIVE_CONFIG_ITEM, "please use --no-input")


def add_history_location_items(cs: ConfigurationSet) -> None:
    cs.add_string(
        HISTORY_LOCATION_CONFIG_ITEM,
        "",
        'Location of where the history is stored. (default "$HOME/.kubehop/history.yaml")',
    )
    cs.set_history_ignore(HISTORY_LOCATION_CONFIG_ITEM)


def add_history_config_items(cs: ConfigurationSet) -> None:
    add_history_location_items(cs)
    cs.add_int(
        MAX_HISTORY_CONFIG_ITEM,
        MAX_HISTORY_ITEMS,
        "Sets the maximum number of history items to keep",
    )
    cs.add_bool(
        NO_HISTORY_CONFIG_ITEM, False, "If set then no history entry will be written"
    )
    cs.add_string(ENTRY_ID_CONFIG_ITEM, "", "Existing entry id")
    cs.set_hidden(ENTRY_ID_CONFIG_ITEM)
    cs.set_history_ignore(MAX_HISTORY_CONFIG_ITEM)
    cs.set_history_ignore(NO_HISTORY_CONFIG_ITEM)
    cs.set_history_ignore(ENTRY_ID_CONFIG_ITEM)


def add_kubeconfig_config_items(cs: ConfigurationSet) -> None:
    cs.add_string(
        KUBECONFIG_CONFIG_ITEM,
        "",
        'Location of the kubeconfig to use. (default "$HOME/.kube/config")',
    )
    cs.set_shorthand(KUBECONFIG_CONFIG_ITEM, "k")


def add_common_use_config_items(cs: ConfigurationSet) -> None:
    cs.add_string(NAMESPACE_CONFIG_ITEM, "", "Sets namespace for context in kubeconfig")
    cs.set_shorthand(NAMESPACE_CONFIG_ITEM, "n")
    cs.add_bool(
        SET_CURRENT_CONFIG_ITEM, True, "Sets the current context in the kubeconfig"
    )
    cs.set_history_ignore(SET_CURRENT_CONFIG_ITEM)


def add_common_cluster_config_items(cs: ConfigurationSet) -> None:
    cs.add_string(CLUSTER_ID_CONFIG_ITEM, "", "Id of the cluster to use.")
    cs.add_string(ALIAS_CONFIG_ITEM, "", "Friendly name to give to the connection")
    cs.set_shorthand(CLUSTER_ID_CONFIG_ITEM, "c")
    cs.set_shorthand(ALIAS_CONFIG_ITEM, "a")
    cs.set_history_ignore(ALIAS_CONFIG_ITEM)


class ParamsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CommonConfig(ParamsModel):
    config_file: Optional[str] = Field(None, alias=CONFIG_PATH_CONFIG_ITEM)
    no_input: bool = Field(False, alias=NO_INPUT_CONFIG_ITEM)
    non_interactive: bool = Field(False, alias=NON_INTERACTIVE_CONFIG_ITEM)


class HistoryLocationConfig(ParamsModel):
    location: Optional[str] = Field(None, alias=HISTORY_LOCATION_CONFIG_ITEM)


class HistoryConfig(HistoryLocationConfig):
    max_items: int = Field(MAX_HISTORY_ITEMS, alias=MAX_HISTORY_CONFIG_ITEM)
    no_history: bool = Field(False, alias=NO_HISTORY_CONFIG_ITEM)
    entry_id: Optional[str] = Field(None, alias=ENTRY_ID_CONFIG_ITEM)


class KubernetesConfig(ParamsModel):
    kubeconfig: Optional[str] = Field(None, alias=KUBECONFIG_CONFIG_ITEM)


class CommonUseConfig(ParamsModel):
    namespace: Optional[str] = Field(None, alias=NAMESPACE_CONFIG_ITEM)
    set_current: bool = Field(True, alias=SET_CURRENT_CONFIG_ITEM)


class ClusterConfig(ParamsModel):
    cluster_id: Optional[str] = Field(None, alias=CLUSTER_ID_CONFIG_ITEM)
    alias: Optional[str] = Field(None, alias=ALIAS_CONFIG_ITEM)


class UseInput(
    CommonConfig, HistoryConfig, KubernetesConfig, CommonUseConfig, ClusterConfig
):
    """
    Parameters of the use command, bound from its configuration set.
    """

    discovery_provider: str = ""
    identity_provider: str = ""
    ignore_alias: bool = False
