from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional

from kubehop.app.items import (
    KUBECONFIG_CONFIG_ITEM,
    UseInput,
    add_common_cluster_config_items,
    add_common_config_items,
    add_common_use_config_items,
    add_history_config_items,
    add_kubeconfig_config_items,
)
from kubehop.config.app_config import (
    AppConfiguration,
    AppConfigurationFile,
    read_source,
)
from kubehop.config.binder import unmarshal
from kubehop.config.configset import ConfigurationSet
from kubehop.config.item import coerce_item_value
from kubehop.config.resolve import apply_defaults, apply_to_config_set
from kubehop.constants import MAX_HISTORY_ITEMS
from kubehop.errors import (
    AliasInUseError,
    EntryNotFoundError,
    InvalidConfigValueError,
    KubehopError,
    RequiredItemMissingError,
    UnsupportedIdentityProviderError,
)
from kubehop.history.entry import (
    HistoryEntry,
    HistoryEntryList,
    new_history_entry,
    new_history_entry_list,
)
from kubehop.history.filter import (
    create_filter_from_map,
    filter_history,
    parse_key_values,
)
from kubehop.history.flags import flags_from_config_set
from kubehop.history.loader import FileLoader
from kubehop.history.store import HistoryStore
from kubehop.kubeconfig import (
    add_history_reference,
    default_kubeconfig_path,
    get_current_entry_id,
    write_kubeconfig,
)
from kubehop.logger import logger
from kubehop.prompt import ask, choose, confirm, resolve_interactively
from kubehop.providers.base import Cluster, DiscoveryProvider, Identity
from kubehop.providers.registry import ProviderRegistry

_LAST_POSITION = re.compile(r"LAST~(\d+)")


def build_use_config(
    registry: ProviderRegistry, discovery: str, identity: str
) -> ConfigurationSet:
    """
    Builds the configuration set of the use command for a provider pair.
    """
    cs = ConfigurationSet()
    cs.merge(registry.get_identity_class(identity).config_items())
    cs.merge(registry.get_discovery_class(discovery).config_items())
    add_common_cluster_config_items(cs)
    add_kubeconfig_config_items(cs)
    add_common_config_items(cs)
    add_common_use_config_items(cs)
    add_history_config_items(cs)
    return cs


class App:
    """
    The command handlers of kubehop.

    Args:
        registry (ProviderRegistry): The available providers.
        store (HistoryStore): The connection history.
        app_config_file (Optional[AppConfigurationFile]): The application wide
            defaults. Defaults to the file in the kubehop data directory.
        interactive (bool): Whether the user can be prompted.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        store: HistoryStore,
        app_config_file: Optional[AppConfigurationFile] = None,
        interactive: bool = True,
    ) -> None:
        self.registry = registry
        self.store = store
        self.app_config_file = app_config_file or AppConfigurationFile()
        self.interactive = interactive

    def build_use_config(self, discovery: str, identity: str) -> ConfigurationSet:
        return build_use_config(self.registry, discovery, identity)

    def resolve_config(
        self, cs: ConfigurationSet, provider: Optional[str] = None
    ) -> AppConfiguration:
        app_config = self.app_config_file.get()
        apply_to_config_set(cs, app_config, provider)
        resolve_interactively(cs, app_config, self.interactive)
        apply_defaults(cs)
        return app_config

    def use(self, params: UseInput, cs: ConfigurationSet) -> Optional[str]:
        """
        Connects to a cluster and writes its kubeconfig.

        Authenticates with the identity provider, discovers the clusters (or
        gets the one with the given cluster id), records the connection in the
        history and merges the cluster's context into the kubeconfig.

        Args:
            params (UseInput): The bound parameters.
            cs (ConfigurationSet): The resolved configuration set.

        Returns:
            Optional[str]: The id of the history entry of the connection, or None
            if no cluster was found or no history was written.
        """
        identity_provider = self.registry.get_identity(
            params.identity_provider, self.interactive
        )
        discovery_provider = self.registry.get_discovery(
            params.discovery_provider, self.interactive
        )
        if not self.registry.is_identity_supported(
            params.discovery_provider, params.identity_provider
        ):
            raise UnsupportedIdentityProviderError(
                params.discovery_provider, params.identity_provider
            )

        identity_provider.validate(cs)
        identity = identity_provider.authenticate(cs)
        discovery_provider.resolve(cs, identity)

        if params.cluster_id:
            cluster = discovery_provider.get_cluster(cs, identity, params.cluster_id)
        else:
            cluster = self._discover_cluster(discovery_provider, cs, identity)
        if cluster is None:
            return None

        kubeconfig, context_name = discovery_provider.get_config(
            cluster, identity, params.namespace
        )

        if not params.ignore_alias:
            self._resolve_and_check_alias(params)

        entry_id = params.entry_id
        if not params.no_history:
            entry = new_history_entry()
            entry.spec.alias = params.alias or None
            entry.spec.config_file = params.kubeconfig or ""
            entry.spec.flags = flags_from_config_set(cs)
            entry.spec.identity = params.identity_provider
            entry.spec.provider = params.discovery_provider
            entry.spec.provider_id = cluster.id
            self.store.add(entry)
            entry_id = entry.id

        if entry_id:
            add_history_reference(kubeconfig, context_name, entry_id)

        path = params.kubeconfig or default_kubeconfig_path()
        write_kubeconfig(path, kubeconfig, params.set_current)
        logger.info(f"Context {context_name} written to {path}")

        return entry_id

    def _discover_cluster(
        self, provider: DiscoveryProvider, cs: ConfigurationSet, identity: Identity
    ) -> Optional[Cluster]:
        clusters = provider.discover(cs, identity)
        if not clusters:
            logger.warning("No clusters discovered.")
            return None

        if len(clusters) == 1:
            return next(iter(clusters.values()))

        if not self.interactive:
            raise RequiredItemMissingError("cluster-id")

        options = [(cluster.name, cluster) for cluster in clusters.values()]
        return choose("Select a cluster", options)

    def _alias_in_use(self, alias: Optional[str]) -> bool:
        if not alias:
            return False
        return self.store.get_by_alias(alias) is not None

    def _resolve_and_check_alias(self, params: UseInput) -> None:
        if not params.alias:
            if not self.interactive:
                return
            if not confirm("Do you want to set an alias?"):
                return
            params.alias = ask("Enter the alias name")

        if self._alias_in_use(params.alias):
            raise AliasInUseError(params.alias or "")

        logger.info(f"Command to reconnect using this alias: kubehop to {params.alias}")

    def get_history_entry(
        self, target: str, kubeconfig: Optional[str] = None
    ) -> HistoryEntry:
        """
        Finds the history entry a `to` target refers to.

        The target is one of: empty to pick interactively, `-` or `LAST` for the
        most recently used entry, `LAST~N` for the nth most recently used
        entry, an entry id or an alias.

        Raises:
            EntryNotFoundError: If no entry matches.
        """
        if target == "":
            return self._choose_history_entry(kubeconfig)

        if target in ("-", "LAST"):
            return self.store.get_nth_last_used(0)

        match = _LAST_POSITION.fullmatch(target)
        if match:
            return self.store.get_nth_last_used(int(match.group(1)))

        entry = self.store.get_by_id(target)
        if entry is None:
            entry = self.store.get_by_alias(target)
        if entry is None:
            raise EntryNotFoundError(target)

        return entry

    def _choose_history_entry(self, kubeconfig: Optional[str]) -> HistoryEntry:
        if not self.interactive:
            raise KubehopError("A history entry id or alias is required")

        entries = self.store.get_all_sorted_by_last_used()
        if not entries.items:
            raise EntryNotFoundError()

        current_id = get_current_entry_id(kubeconfig)
        options = []
        for entry in entries.items:
            marker = ">" if entry.id == current_id else " "
            label = " ".join(
                [
                    marker,
                    entry.id,
                    entry.alias_or_blank,
                    entry.spec.provider,
                    entry.spec.provider_id,
                ]
            )
            options.append((label, entry))

        return choose("Select a history entry", options)

    def connect_to(
        self,
        target: str,
        kubeconfig: Optional[str] = None,
        set_current: bool = True,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """
        Reconnects using a history entry.

        The configuration set of the entry's providers is rebuilt and the
        entry's flags are replayed into it before the usual resolution, so
        nothing that was answered before is asked again.

        Args:
            target (str): The entry to reconnect to, see `get_history_entry`.
            kubeconfig (Optional[str]): The kubeconfig to write to.
            set_current (bool): Whether to make the context the current one.
            overrides (Optional[Dict[str, Any]]): Values that take precedence
                over the entry's flags, such as a password.

        Returns:
            Optional[str]: The id of the history entry.
        """
        entry = self.get_history_entry(target, kubeconfig)
        logger.debug(f"Connecting to history entry {entry.id}")

        cs = self.build_use_config(entry.spec.provider, entry.spec.identity)

        for name, raw in entry.spec.flags.items():
            item = cs.get(name)
            if item is None:
                logger.debug(f"No config item found for history flag {name}")
                continue
            try:
                item.value = coerce_item_value(item, raw)
            except ValueError as e:
                raise InvalidConfigValueError(name, "history", raw, str(e)) from e

        for name, value in (overrides or {}).items():
            item = cs.get(name)
            if item is None or value is None:
                continue
            try:
                item.value = coerce_item_value(item, value)
            except ValueError as e:
                raise InvalidConfigValueError(name, "flags", value, str(e)) from e

        if kubeconfig:
            cs.set_value(KUBECONFIG_CONFIG_ITEM, kubeconfig)

        self.resolve_config(cs, entry.spec.provider)

        params = unmarshal(cs, UseInput)
        params.discovery_provider = entry.spec.provider
        params.identity_provider = entry.spec.identity
        params.entry_id = entry.id
        params.cluster_id = entry.spec.provider_id
        params.set_current = set_current
        params.ignore_alias = True
        params.alias = None

        return self.use(params, cs)

    def renew(
        self,
        kubeconfig: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """
        Reconnects to the history entry of the current kubeconfig context.
        """
        entry_id = get_current_entry_id(kubeconfig)
        if not entry_id:
            raise KubehopError(
                "The current context was not created by kubehop, no history entry found"
            )

        return self.connect_to(entry_id, kubeconfig=kubeconfig, overrides=overrides)

    def current_entry_id(self, kubeconfig: Optional[str] = None) -> Optional[str]:
        return get_current_entry_id(kubeconfig)

    def query_history(
        self, filter_map: Optional[Dict[str, str]] = None
    ) -> HistoryEntryList:
        entries = self.store.get_all_sorted_by_last_used()
        return filter_history(entries, create_filter_from_map(filter_map or {}))

    def history_import(
        self,
        file: str,
        filter_text: str = "",
        set_text: str = "",
        clean: bool = False,
        overwrite: bool = False,
    ) -> int:
        """
        Imports history entries from a file.

        Imported entries get new ids. An imported entry whose alias is already
        used is skipped, or replaces the existing entry with `overwrite`.

        Args:
            file (str): The history file to import.
            filter_text (str): "key=value,..." filter applied to the imported
                entries.
            set_text (str): "key=value,..." flags set on every imported entry.
            clean (bool): Delete the existing history first.
            overwrite (bool): Replace existing entries with the same alias.

        Returns:
            int: The number of entries imported.
        """
        if not os.path.isfile(file):
            raise KubehopError(f"History file {file} not found")

        logger.info(f"Importing history from {file}")
        import_list = FileLoader(file).load()
        import_list = filter_history(
            import_list, create_filter_from_map(parse_key_values(filter_text))
        )
        set_flags = parse_key_values(set_text)

        if clean:
            logger.info("Deleting existing history")
            history = new_history_entry_list()
        else:
            history = self.store.get_all()

        count = 0
        for imported in import_list.items:
            entry = _copy_entry(imported, set_flags)
            index = _alias_index(history, entry.spec.alias)
            if index is None:
                history.items.append(entry)
                count += 1
            elif overwrite:
                logger.info(f"Entry with alias {entry.spec.alias} exists, overwriting")
                history.items[index] = entry
                count += 1
            else:
                logger.info(f"Entry with alias {entry.spec.alias} exists, skipping")

        logger.info(f"Importing {count} entries")
        self.store.set_history_list(history)
        return count

    def history_export(
        self, file: str, filter_text: str = "", set_text: str = ""
    ) -> int:
        logger.info(f"Exporting history to {file}")
        history = filter_history(
            self.store.get_all(), create_filter_from_map(parse_key_values(filter_text))
        )
        set_flags = parse_key_values(set_text)

        export_list = new_history_entry_list(
            [_copy_entry(entry, set_flags) for entry in history.items]
        )
        FileLoader(file).save(export_list)

        logger.info(f"Exported {len(export_list.items)} entries")
        return len(export_list.items)

    def history_remove(
        self,
        ids: Optional[List[str]] = None,
        remove_all: bool = False,
        filter_text: str = "",
    ) -> int:
        """
        Removes history entries by id, by filter or all of them.

        Raises:
            EntryNotFoundError: If one of the ids is not in the history. Nothing
            is removed in that case.
        """
        if remove_all:
            entries = self.store.get_all().items
        elif filter_text:
            entries = filter_history(
                self.store.get_all(),
                create_filter_from_map(parse_key_values(filter_text)),
            ).items
        else:
            entries = []
            for entry_id in ids or []:
                entry = self.store.get_by_id(entry_id)
                if entry is None:
                    raise EntryNotFoundError(entry_id)
                entries.append(entry)

        logger.info(f"Removing {len(entries)} entries")
        self.store.remove(entries)
        return len(entries)

    def alias_list(self) -> List[str]:
        entries = self.store.get_all().items
        return [entry.spec.alias for entry in entries if entry.spec.alias]

    def alias_add(self, entry_id: str, alias: str) -> None:
        if not alias:
            raise KubehopError("An alias is required")
        if not entry_id:
            raise KubehopError("A history entry id is required")
        if self._alias_in_use(alias):
            raise AliasInUseError(alias)

        entry = self.store.get_by_id(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)

        entry.spec.alias = alias
        self.store.update(entry)
        logger.info(f"Alias {alias} added to history entry {entry_id}")

    def alias_remove(
        self, entry_id: str = "", alias: str = "", remove_all: bool = False
    ) -> int:
        if not entry_id and not alias and not remove_all:
            logger.warning("No remove criteria specified, no action taken")
            return 0
        if entry_id and alias:
            raise KubehopError("An alias and an id can't be used together")

        found: List[HistoryEntry] = []
        if remove_all:
            found = [entry for entry in self.store.get_all().items if entry.spec.alias]
        elif alias:
            entry = self.store.get_by_alias(alias)
            if entry is not None:
                found.append(entry)
        else:
            entry = self.store.get_by_id(entry_id)
            if entry is not None:
                found.append(entry)

        if not found:
            logger.info("No history entries found with the matching alias details")
            return 0

        for entry in found:
            logger.debug(f"Removing alias {entry.spec.alias} from {entry.id}")
            entry.spec.alias = None
            self.store.update(entry)

        logger.info(f"Removed aliases from {len(found)} history entries")
        return len(found)

    def show_configuration(self) -> AppConfiguration:
        return self.app_config_file.get()

    def import_configuration(
        self, location: str, username: str = "", password: str = ""
    ) -> AppConfiguration:
        if not location:
            raise KubehopError("A source location is required")

        logger.info(f"Importing configuration from {location}")
        configuration = self.app_config_file.parse(
            read_source(location, username, password)
        )
        configuration.imported_from = location
        self.app_config_file.save(configuration)
        logger.info("Successfully imported configuration")
        return configuration


def _copy_entry(entry: HistoryEntry, set_flags: Dict[str, str]) -> HistoryEntry:
    new_entry = new_history_entry()
    new_entry.spec = entry.spec.model_copy(deep=True)
    new_entry.spec.flags.update(set_flags)
    return new_entry


def _alias_index(history: HistoryEntryList, alias: Optional[str]) -> Optional[int]:
    if not alias:
        return None
    for i, entry in enumerate(history.items):
        if entry.spec.alias == alias:
            return i
    return None


def build_store(
    location: Optional[str] = None, max_history: Optional[int] = None
) -> HistoryStore:
    return HistoryStore(
        max_history if max_history is not None else MAX_HISTORY_ITEMS,
        FileLoader(location),
    )
