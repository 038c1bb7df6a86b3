"""Abstract collection store.

A collection is a set of JSON-compatible dict records, each identified by
the value of its key field (``id`` by default).
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

Record = dict[str, Any]
Predicate = Callable[[Record], bool]
Change = Callable[[Record], Optional[Record]]


class StoreError(Exception):
    """Raised when a collection cannot be read or written."""


class CollectionStore(ABC):
    """Interface every record store implements.

    Learn: Records handed out are copies. Mutating a returned dict never
    changes stored state; callers must put() it back, or go through
    update() when the new value depends on the stored one.
    """

    name: str = "collection"
    key_field: str = "id"

    @abstractmethod
    async def get(self, key: str) -> Optional[Record]:
        """Return the record with this key, or None."""

    @abstractmethod
    async def put(self, record: Record) -> Record:
        """Insert or replace a record (matched on key_field)."""

    @abstractmethod
    async def insert_unique(self, record: Record, conflict: Predicate) -> bool:
        """Insert record unless an existing one matches conflict.

        The check and the insert are one step: two concurrent inserts of
        conflicting records can't both succeed. Returns False on conflict.
        """

    @abstractmethod
    async def update(self, key: str, change: Change) -> Optional[Record]:
        """Replace the record at key with change(record), atomically.

        change receives a copy of the stored record. Returning None leaves
        the record untouched. Returns the stored result, or None when the
        key is missing or change declined.
        """

    @abstractmethod
    async def delete(self, key: str, predicate: Optional[Predicate] = None) -> bool:
        """Remove a record, only if it matches predicate when one is given.

        Returns False if nothing was removed.
        """

    @abstractmethod
    async def list(self, predicate: Optional[Predicate] = None) -> list[Record]:
        """Return all records matching predicate, in insertion order."""

    async def find(self, predicate: Predicate) -> Optional[Record]:
        """Return the first record matching predicate, or None."""
        matches = await self.list(predicate)
        return matches[0] if matches else None

    async def check(self) -> None:
        """Raise StoreError if the backing storage is unusable."""
        await self.list()

    def _key_of(self, record: Record) -> str:
        try:
            return str(record[self.key_field])
        except KeyError:
            raise StoreError(f"{self.name}: record has no '{self.key_field}' field")
