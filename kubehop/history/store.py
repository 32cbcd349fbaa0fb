from __future__ import annotations

from typing import Callable, List, Optional

from kubehop.errors import (
    DuplicateAliasError,
    EntryNotFoundError,
    NoEntriesError,
    NoLoaderError,
)
from kubehop.history.entry import HistoryEntry, HistoryEntryList
from kubehop.history.loader import Loader
from kubehop.logger import logger
from kubehop.utils import utc_now


class HistoryStore:
    """
    The persisted, size bounded list of past connections.

    Every mutating operation loads the whole list from the loader, changes it in
    memory and saves the whole list back. There is no locking: two processes
    writing the same history at the same time can lose updates.

    When the list grows past `max_history` the oldest entries by position are
    dropped. Position is the order entries were first added, so an old entry
    that is reused often can still be evicted by newer distinct connections.
    """

    def __init__(self, max_history: int, loader: Optional[Loader]) -> None:
        if loader is None:
            raise NoLoaderError()

        self.max_history = max_history
        self.loader = loader

    def add(self, entry: HistoryEntry) -> None:
        """
        Adds a connection to the history.

        If an entry for the same connection already exists it is reused: its
        last used time is refreshed and, when it has no alias, the alias of the
        new entry is copied across. The id of the surviving entry is written
        back to `entry`.

        Args:
            entry (HistoryEntry): The connection to record.
        """
        history = self.loader.load()

        existing = self._find_connection(history, entry)
        if existing is not None:
            logger.debug(f"Connection already in history as {existing.id}")
            now = utc_now()
            existing.status.last_used = now
            existing.status.last_modified = now
            existing.metadata.generation += 1
            if not existing.spec.alias and entry.spec.alias:
                existing.spec.alias = entry.spec.alias
            entry.metadata.name = existing.id
        else:
            history.items.append(entry)

        self._trim(history)
        self.loader.save(history)

    def remove(self, entries: List[HistoryEntry]) -> None:
        """
        Removes entries from the history by id.

        Nothing is saved if any of the entries is missing from the history.

        Raises:
            EntryNotFoundError: If an entry id is not in the history.
        """
        history = self.loader.load()

        for entry in entries:
            index = self._index_of(history, entry.id)
            if index is None:
                raise EntryNotFoundError(entry.id)
            del history.items[index]

        self.loader.save(history)

    def get_all(self) -> HistoryEntryList:
        return self.loader.load()

    def get_all_sorted_by_last_used(self) -> HistoryEntryList:
        history = self.loader.load()
        history.items.sort(key=lambda e: e.status.last_used, reverse=True)
        return history

    def get_by_id(self, entry_id: str) -> Optional[HistoryEntry]:
        entries = self._filter(lambda e: e.id == entry_id)
        return entries[0] if entries else None

    def get_by_alias(self, alias: str) -> Optional[HistoryEntry]:
        """
        Raises:
            DuplicateAliasError: If more than one entry has the alias.
        """
        entries = self._filter(lambda e: bool(e.spec.alias) and e.spec.alias == alias)
        if len(entries) > 1:
            raise DuplicateAliasError(alias)
        return entries[0] if entries else None

    def get_by_provider(self, provider: str) -> List[HistoryEntry]:
        return self._filter(lambda e: e.spec.provider == provider)

    def get_by_provider_with_id(
        self, provider: str, provider_id: str
    ) -> List[HistoryEntry]:
        return self._filter(
            lambda e: e.spec.provider == provider and e.spec.provider_id == provider_id
        )

    def get_nth_last_used(self, n: int) -> HistoryEntry:
        """
        Returns the nth most recently used entry, 0 being the most recent.

        Raises:
            NoEntriesError: If the history is empty.
            EntryNotFoundError: If n is out of range.
        """
        history = self.get_all_sorted_by_last_used()
        if not history.items:
            raise NoEntriesError()
        if n < 0 or n >= len(history.items):
            raise EntryNotFoundError()
        return history.items[n]

    def update(self, entry: HistoryEntry) -> None:
        """
        Replaces the entry with the same id.

        Raises:
            NoEntriesError: If the history is empty.
            EntryNotFoundError: If no entry has the id.
        """
        history = self.loader.load()
        if not history.items:
            raise NoEntriesError()

        index = self._index_of(history, entry.id)
        if index is None:
            raise EntryNotFoundError(entry.id)

        entry.status.last_modified = utc_now()
        history.items[index] = entry
        self.loader.save(history)

    def set_history_list(self, history: HistoryEntryList) -> None:
        self._trim(history)
        self.loader.save(history)

    def _trim(self, history: HistoryEntryList) -> None:
        excess = len(history.items) - self.max_history
        if excess > 0:
            logger.debug(f"Dropping {excess} oldest history entries")
            del history.items[:excess]

    def _filter(
        self, predicate: Callable[[HistoryEntry], bool]
    ) -> List[HistoryEntry]:
        return [entry for entry in self.loader.load().items if predicate(entry)]

    @staticmethod
    def _find_connection(
        history: HistoryEntryList, entry: HistoryEntry
    ) -> Optional[HistoryEntry]:
        for existing in history.items:
            if existing.equals(entry):
                return existing
        return None

    @staticmethod
    def _index_of(history: HistoryEntryList, entry_id: str) -> Optional[int]:
        for i, existing in enumerate(history.items):
            if existing.id == entry_id:
                return i
        return None
