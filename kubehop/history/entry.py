from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kubehop.constants import API_VERSION, USERNAME_CONFIG_ITEM
from kubehop.utils import new_entry_id, utc_now

# Flags that never take part in connection identity
IGNORED_FLAGS = {"profile"}


def _ensure_utc(v: datetime) -> datetime:
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class HistoryEntryMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="The unique id of the entry.")
    creation_timestamp: datetime = Field(
        default_factory=utc_now, alias="creationTimestamp"
    )
    generation: int = 1

    @field_validator("creation_timestamp")
    def validate_creation_timestamp(cls, v: datetime) -> datetime:
        return _ensure_utc(v)


class HistoryEntrySpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str = Field("", description="Name of the discovery provider.")
    identity: str = Field("", description="Name of the identity provider.")
    provider_id: str = Field(
        "",
        alias="providerID",
        description="Unique id of the cluster with the discovery provider.",
    )
    flags: Dict[str, str] = Field(
        default_factory=dict, description="The non-sensitive flags and values."
    )
    config_file: str = Field(
        "", alias="configFile", description="The kubeconfig file that was updated."
    )
    alias: Optional[str] = Field(
        None, description="A friendly name for the connection."
    )

    @field_validator("flags", mode="before")
    def validate_flags(cls, v: Optional[Dict[str, object]]) -> Dict[str, str]:
        flags = {}
        for key, value in (v or {}).items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            flags[str(key)] = "" if value is None else str(value)
        return flags


class HistoryEntryStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_modified: datetime = Field(default_factory=utc_now, alias="lastModified")
    last_used: datetime = Field(default_factory=utc_now, alias="lastUsed")

    @field_validator("last_modified", "last_used")
    def validate_timestamps(cls, v: datetime) -> datetime:
        return _ensure_utc(v)


class HistoryEntry(BaseModel):
    """
    The record of one connection to a cluster.
    """

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(API_VERSION, alias="apiVersion")
    kind: str = "HistoryEntry"
    metadata: HistoryEntryMetadata
    spec: HistoryEntrySpec = Field(default_factory=HistoryEntrySpec)
    status: HistoryEntryStatus = Field(default_factory=HistoryEntryStatus)

    @property
    def id(self) -> str:
        return self.metadata.name

    @property
    def alias_or_blank(self) -> str:
        return self.spec.alias or ""

    def equals(self, other: Optional["HistoryEntry"]) -> bool:
        """
        Connection identity equality.

        Two entries represent the same connection when they point at the same
        cluster through the same providers, update the same kubeconfig file and
        were made with the same flags, ignoring `IGNORED_FLAGS` and blank values.
        """
        if other is None:
            return False

        return (
            self.spec.provider == other.spec.provider
            and self.spec.identity == other.spec.identity
            and self.spec.provider_id == other.spec.provider_id
            and self.spec.config_file == other.spec.config_file
            and filter_flags(self.spec.flags) == filter_flags(other.spec.flags)
        )


class HistoryEntryList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(API_VERSION, alias="apiVersion")
    kind: str = "HistoryEntryList"
    items: List[HistoryEntry] = Field(default_factory=list)

    @field_validator("items", mode="before")
    def validate_items(cls, v: Optional[List[HistoryEntry]]) -> List[HistoryEntry]:
        return v or []

    def to_table(self, current_id: str = "") -> List[List[str]]:
        rows = []
        for entry in self.items:
            rows.append(
                [
                    ">" if current_id and entry.id == current_id else "",
                    entry.id,
                    entry.alias_or_blank,
                    entry.spec.provider,
                    entry.spec.provider_id,
                    entry.spec.identity,
                    entry.spec.flags.get(USERNAME_CONFIG_ITEM, ""),
                    entry.status.last_used.strftime("%Y-%m-%d %H:%M:%S"),
                ]
            )
        return rows


TABLE_HEADERS = [
    "Cur",
    "Id",
    "Alias",
    "Provider",
    "ProviderID",
    "Identity",
    "User",
    "Last used",
]


class HistoryReference(BaseModel):
    """
    Kubeconfig context extension that points a context at its history entry.
    """

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(API_VERSION, alias="apiVersion")
    kind: str = "HistoryReference"
    entry_id: str = Field(..., alias="entryID")


def filter_flags(flags: Optional[Dict[str, str]]) -> Dict[str, str]:
    return {
        k: v for k, v in (flags or {}).items() if k not in IGNORED_FLAGS and v != ""
    }


def new_history_entry() -> HistoryEntry:
    created = utc_now()
    return HistoryEntry(
        metadata=HistoryEntryMetadata(
            name=new_entry_id(created.timestamp()),
            creation_timestamp=created,
            generation=1,
        ),
        status=HistoryEntryStatus(last_modified=created, last_used=created),
    )


def new_history_entry_list(
    items: Optional[List[HistoryEntry]] = None,
) -> HistoryEntryList:
    return HistoryEntryList(items=items or [])
