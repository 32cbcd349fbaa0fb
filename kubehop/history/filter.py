from __future__ import annotations

from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from kubehop.errors import InvalidFilterInputError
from kubehop.history.entry import HistoryEntry, HistoryEntryList


class FilterSpec(BaseModel):
    """
    Match criteria for history entries. Criteria left unset or blank match
    every entry.
    """

    cluster_provider: Optional[str] = None
    identity_provider: Optional[str] = None
    provider_id: Optional[str] = None
    history_id: Optional[str] = None
    alias: Optional[str] = None
    kubeconfig: Optional[str] = None
    flags: Dict[str, str] = Field(default_factory=dict)


FilterFunc = Callable[[FilterSpec, HistoryEntry], bool]


def equals_with_wildcard(pattern: str, value: str) -> bool:
    """
    Compares a value against a pattern with an optional leading and/or trailing
    `*`.

    Example:
        >>> equals_with_wildcard("*match", "thisshouldmatch")
        True
        >>> equals_with_wildcard("match*", "thisshouldnotmatch")
        False
    """
    starts = pattern.startswith("*")
    ends = pattern.endswith("*") and len(pattern) > 1

    if starts and ends:
        return pattern[1:-1] in value
    if starts:
        return value.endswith(pattern[1:])
    if ends:
        return value.startswith(pattern[:-1])
    return pattern == value


def _matches(criterion: Optional[str], value: Optional[str]) -> bool:
    if not criterion:
        return True
    return equals_with_wildcard(criterion, value or "")


def by_history_id(spec: FilterSpec, entry: HistoryEntry) -> bool:
    return _matches(spec.history_id, entry.id)


def by_provider_id(spec: FilterSpec, entry: HistoryEntry) -> bool:
    return _matches(spec.provider_id, entry.spec.provider_id)


def by_alias(spec: FilterSpec, entry: HistoryEntry) -> bool:
    return _matches(spec.alias, entry.spec.alias)


def by_cluster_provider(spec: FilterSpec, entry: HistoryEntry) -> bool:
    return _matches(spec.cluster_provider, entry.spec.provider)


def by_identity_provider(spec: FilterSpec, entry: HistoryEntry) -> bool:
    return _matches(spec.identity_provider, entry.spec.identity)


def by_kubeconfig(spec: FilterSpec, entry: HistoryEntry) -> bool:
    return _matches(spec.kubeconfig, entry.spec.config_file)


def by_flags(spec: FilterSpec, entry: HistoryEntry) -> bool:
    for key, value in spec.flags.items():
        if key not in entry.spec.flags:
            return False
        if not equals_with_wildcard(value, entry.spec.flags[key]):
            return False
    return True


DEFAULT_FILTER_FUNCS: List[FilterFunc] = [
    by_history_id,
    by_provider_id,
    by_alias,
    by_cluster_provider,
    by_identity_provider,
    by_kubeconfig,
    by_flags,
]


def filter_entry(
    entry: HistoryEntry, spec: FilterSpec, funcs: List[FilterFunc]
) -> bool:
    return all(func(spec, entry) for func in funcs)


def filter_history(
    history: Optional[HistoryEntryList],
    spec: Optional[FilterSpec],
    funcs: Optional[List[FilterFunc]] = None,
) -> HistoryEntryList:
    """
    Returns a new list with the entries matching every filter function, in
    their original order. The source list is not changed.

    Raises:
        InvalidFilterInputError: If the list or the spec is None.
    """
    if history is None:
        raise InvalidFilterInputError("history list is None")
    if spec is None:
        raise InvalidFilterInputError("filter spec is None")

    funcs = DEFAULT_FILTER_FUNCS if funcs is None else funcs

    return HistoryEntryList(
        api_version=history.api_version,
        kind=history.kind,
        items=[entry for entry in history.items if filter_entry(entry, spec, funcs)],
    )


# Filter keys with a dedicated criterion, the rest are matched as flags
_FILTER_KEYS = {
    "alias": "alias",
    "cluster-provider": "cluster_provider",
    "id": "history_id",
    "identity-provider": "identity_provider",
    "kubeconfig": "kubeconfig",
    "provider-id": "provider_id",
}


def create_filter_from_map(filter_map: Dict[str, str]) -> FilterSpec:
    criteria: Dict[str, str] = {}
    flags: Dict[str, str] = {}
    for key, value in filter_map.items():
        if key in _FILTER_KEYS:
            criteria[_FILTER_KEYS[key]] = value
        else:
            flags[key] = value

    return FilterSpec(flags=flags, **criteria)


def parse_key_values(text: str) -> Dict[str, str]:
    """
    Parses a "key1=value1,key2=value2" string into a dict.

    Raises:
        ValueError: If a pair has no `=` or an empty key.
    """
    result: Dict[str, str] = {}
    if not text:
        return result

    for pair in text.split(","):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid filter '{pair}', expected key=value")
        result[key] = value.strip()

    return result
