"""In-memory store.

Same contract as JsonFileStore, backed by a dict. Used by unit tests and
handy for throwaway dev servers.

Learn: Nothing here awaits between reading and writing, so each call runs
to completion on the event loop and needs no lock.
"""

import copy
from typing import Optional

from tasktrack.store.base import Change, CollectionStore, Predicate, Record


class MemoryStore(CollectionStore):
    """Dict-backed collection. Insertion order is preserved."""

    def __init__(self, name: str = "memory", records: Optional[list[Record]] = None):
        self.name = name
        self._records: dict[str, Record] = {}
        for record in records or []:
            self._records[self._key_of(record)] = copy.deepcopy(record)

    async def get(self, key: str) -> Optional[Record]:
        record = self._records.get(str(key))
        return copy.deepcopy(record) if record is not None else None

    async def put(self, record: Record) -> Record:
        self._records[self._key_of(record)] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def insert_unique(self, record: Record, conflict: Predicate) -> bool:
        key = self._key_of(record)
        if key in self._records or any(conflict(r) for r in self._records.values()):
            return False
        self._records[key] = copy.deepcopy(record)
        return True

    async def update(self, key: str, change: Change) -> Optional[Record]:
        key = str(key)
        if key not in self._records:
            return None
        updated = change(copy.deepcopy(self._records[key]))
        if updated is None:
            return None
        self._records[key] = copy.deepcopy(updated)
        return updated

    async def delete(self, key: str, predicate: Optional[Predicate] = None) -> bool:
        key = str(key)
        record = self._records.get(key)
        if record is None or (predicate is not None and not predicate(record)):
            return False
        del self._records[key]
        return True

    async def list(self, predicate: Optional[Predicate] = None) -> list[Record]:
        return [
            copy.deepcopy(r)
            for r in self._records.values()
            if predicate is None or predicate(r)
        ]
