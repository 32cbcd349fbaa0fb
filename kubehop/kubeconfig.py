from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException
from kubernetes.config.kube_config import KUBE_CONFIG_DEFAULT_LOCATION
from ruamel.yaml import YAML

from kubehop.constants import KUBECONFIG_EXTENSION_NAME
from kubehop.history.entry import HistoryReference
from kubehop.logger import logger
from kubehop.utils import read_yaml_file

_MERGED_KEYS = ["clusters", "users", "contexts", "current-context"]


class KubeconfigMerger:
    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config or {}

    def _entries_by_key(self, key: str) -> List[Any]:
        self.config[key] = self.config.get(key) or []
        entries = self.config[key]
        if not isinstance(entries, list):
            raise ValueError(
                f"Tried to insert into {key}, which is a {type(entries)} not a list."
            )
        return entries

    def _index_same_name(
        self, entries: List[Any], new_entry: Dict[str, Any]
    ) -> Optional[int]:
        name = new_entry.get("name")
        if name is None:
            return None
        for i, entry in enumerate(entries):
            if entry.get("name") == name:
                return i
        return None

    def insert_entry(self, key: str, new_entry: Any) -> None:
        entries = self._entries_by_key(key)
        same_name_index = self._index_same_name(entries, new_entry)
        if same_name_index is None:
            entries.append(new_entry)
        else:
            entries[same_name_index] = new_entry

    def merge(self, new_config: Dict[str, Any], set_current: bool = True) -> None:
        for cluster in new_config.get("clusters", []):
            self.insert_entry("clusters", cluster)
        for user in new_config.get("users", []):
            self.insert_entry("users", user)
        for context in new_config.get("contexts", []):
            self.insert_entry("contexts", context)

        if set_current or not self.config.get("current-context"):
            self.config["current-context"] = new_config.get("current-context", "")

        for key in new_config.keys():
            if key not in _MERGED_KEYS and key not in self.config:
                self.config[key] = new_config[key]


def default_kubeconfig_path() -> str:
    """
    The kubeconfig file to write to when none is given: the first path of the
    KUBECONFIG environment variable, or the kubernetes client default.
    """
    env = os.environ.get("KUBECONFIG", "")
    paths = [p for p in env.split(os.pathsep) if p]
    if paths:
        return os.path.expanduser(paths[0])
    return os.path.expanduser(KUBE_CONFIG_DEFAULT_LOCATION)


def add_history_reference(
    kubeconfig: Dict[str, Any], context_name: str, entry_id: str
) -> None:
    reference = HistoryReference(entry_id=entry_id).model_dump(by_alias=True)
    for context in kubeconfig.get("contexts", []):
        if context.get("name") == context_name:
            context["context"]["extensions"] = [
                {"name": KUBECONFIG_EXTENSION_NAME, "extension": reference}
            ]
            return

    raise ValueError(f"Context {context_name} not found in kubeconfig")


def write_kubeconfig(
    path: str, kubeconfig: Dict[str, Any], set_current: bool = True
) -> None:
    """
    Merges a kubeconfig into the file at the given path, replacing clusters,
    users and contexts with the same name.

    Args:
        path (str): The kubeconfig file. Created when missing.
        kubeconfig (Dict[str, Any]): The kubeconfig to merge in.
        set_current (bool): Whether to make the new context the current one.
    """
    path = os.path.abspath(os.path.expanduser(path))
    current_config = read_yaml_file(path)
    merger = KubeconfigMerger(current_config)

    merger.merge(kubeconfig, set_current)

    sorted_config = {k: merger.config[k] for k in sorted(merger.config)}

    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as file:
        yaml = YAML()
        yaml.dump(sorted_config, file)

    logger.debug(f"Kubeconfig written to {path}")


def get_current_entry_id(path: Optional[str] = None) -> Optional[str]:
    """
    Returns the id of the history entry the current context of a kubeconfig was
    created from, or None if the context has no history reference.
    """
    path = path or default_kubeconfig_path()
    if not os.path.exists(path):
        return None

    try:
        _, active_context = k8s_config.list_kube_config_contexts(config_file=path)
    except ConfigException as e:
        logger.debug(f"Unable to read the current context: {e}")
        return None

    if not active_context:
        return None

    extensions = (active_context.get("context") or {}).get("extensions") or []
    for extension in extensions:
        if extension.get("name") == KUBECONFIG_EXTENSION_NAME:
            reference = HistoryReference.model_validate(extension.get("extension", {}))
            return reference.entry_id

    return None
