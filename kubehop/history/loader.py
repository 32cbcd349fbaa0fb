from __future__ import annotations

from typing import Optional, Protocol

from kubehop.history.entry import HistoryEntryList, new_history_entry_list
from kubehop.logger import logger
from kubehop.utils import ensure_file, from_yaml, get_history_path, to_yaml


class Loader(Protocol):
    def load(self) -> HistoryEntryList: ...

    def save(self, entries: HistoryEntryList) -> None: ...


class FileLoader:
    """
    Loads and saves the connection history as a YAML file.

    The file, and any missing parent directories, is created on first use.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = ensure_file(path or get_history_path())

    def load(self) -> HistoryEntryList:
        with open(self.path, "r") as file:
            text = file.read()

        if not text.strip():
            return new_history_entry_list()

        data = from_yaml(text) or {}
        return HistoryEntryList.model_validate(data)

    def save(self, entries: HistoryEntryList) -> None:
        logger.debug(f"Saving {len(entries.items)} history entries to {self.path}")
        data = entries.model_dump(mode="json", by_alias=True, exclude_none=True)
        with open(self.path, "w") as file:
            file.write(to_yaml(data))
