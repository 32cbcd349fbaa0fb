from __future__ import annotations

from typing import Optional


class KubehopError(Exception):
    """Base class for all errors raised by kubehop."""


class DuplicateItemError(KubehopError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Config item with name '{name}' already exists in set")
        self.name = name


class ItemNotFoundError(KubehopError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Config item '{name}' not found")
        self.name = name


class InvalidConfigValueError(KubehopError):
    """Raised when a stored value can't be coerced to the type of its item."""

    def __init__(self, name: str, source: str, value: str, reason: str = "") -> None:
        message = f"Invalid value '{value}' for config item '{name}' from {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.name = name
        self.source = source
        self.value = value


class UnsupportedFieldTypeError(KubehopError):
    def __init__(self, field: str, field_type: object) -> None:
        super().__init__(f"Can't bind field '{field}' of type {field_type}")
        self.field = field


class RequiredItemMissingError(KubehopError):
    def __init__(self, name: str) -> None:
        super().__init__(
            f"Config item '{name}' is required but has no value. "
            f"Supply it with --{name}."
        )
        self.name = name


class DuplicateAliasError(KubehopError):
    def __init__(self, alias: str) -> None:
        super().__init__(f"Duplicate alias detected: {alias}")
        self.alias = alias


class AliasInUseError(KubehopError):
    def __init__(self, alias: str) -> None:
        super().__init__(f"Alias '{alias}' is already in use")
        self.alias = alias


class EntryNotFoundError(KubehopError):
    def __init__(self, entry_id: Optional[str] = None) -> None:
        if entry_id:
            super().__init__(f"History entry '{entry_id}' not found")
        else:
            super().__init__("History entry not found")
        self.entry_id = entry_id


class NoEntriesError(KubehopError):
    def __init__(self) -> None:
        super().__init__("No history entries found")


class NoLoaderError(KubehopError):
    def __init__(self) -> None:
        super().__init__("A loader is required for the history store")


class InvalidFilterInputError(KubehopError):
    pass


class PluginNotFoundError(KubehopError):
    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"No {kind} provider named '{name}' is registered")
        self.name = name


class DuplicatePluginError(KubehopError):
    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"A {kind} provider named '{name}' is already registered")
        self.name = name


class UnsupportedIdentityProviderError(KubehopError):
    def __init__(self, discovery: str, identity: str) -> None:
        super().__init__(
            f"Identity provider '{identity}' can't be used with '{discovery}'"
        )


class ClusterNotFoundError(KubehopError):
    def __init__(self, cluster_id: str) -> None:
        super().__init__(f"Cluster with id '{cluster_id}' not found")
        self.cluster_id = cluster_id
