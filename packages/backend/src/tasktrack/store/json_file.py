"""JSON file store — one collection per file.

Learn: The whole collection lives in a single file as a pretty-printed JSON
array. Every mutation is a full read-modify-write:

1. Acquire the store's asyncio.Lock (serializes writers in this process)
2. Read and parse the whole file
3. Run any check the change depends on (a uniqueness conflict, the
   caller's predicate) and apply the change in memory
4. Write to a temp file in the same directory, then os.replace() it over
   the original (a reader never sees a half-written file)

File I/O runs in a worker thread so the event loop keeps serving other
requests. Separate processes writing the same file are still
last-writer-wins.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog

from tasktrack.store.base import Change, CollectionStore, Predicate, Record, StoreError

logger = structlog.get_logger()


class JsonFileStore(CollectionStore):
    """Collection persisted as a JSON array in `path`."""

    def __init__(self, path: str | Path, name: Optional[str] = None, key_field: str = "id"):
        self.path = Path(path)
        self.name = name or self.path.stem
        self.key_field = key_field
        self._lock = asyncio.Lock()

    # ─── Read ────────────────────────────────────────────

    async def get(self, key: str) -> Optional[Record]:
        key = str(key)
        for record in await self._load():
            if self._key_of(record) == key:
                return record
        return None

    async def list(self, predicate: Optional[Predicate] = None) -> list[Record]:
        records = await self._load()
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    # ─── Write ───────────────────────────────────────────

    async def put(self, record: Record) -> Record:
        key = self._key_of(record)
        async with self._lock:
            records = await self._load()
            for i, existing in enumerate(records):
                if self._key_of(existing) == key:
                    records[i] = record
                    break
            else:
                records.append(record)
            await self._save(records)
        return record

    async def insert_unique(self, record: Record, conflict: Predicate) -> bool:
        key = self._key_of(record)
        async with self._lock:
            records = await self._load()
            if any(self._key_of(r) == key or conflict(r) for r in records):
                return False
            records.append(record)
            await self._save(records)
        return True

    async def update(self, key: str, change: Change) -> Optional[Record]:
        key = str(key)
        async with self._lock:
            records = await self._load()
            for i, existing in enumerate(records):
                if self._key_of(existing) != key:
                    continue
                updated = change(existing)
                if updated is None:
                    return None
                records[i] = updated
                await self._save(records)
                return updated
        return None

    async def delete(self, key: str, predicate: Optional[Predicate] = None) -> bool:
        key = str(key)
        async with self._lock:
            records = await self._load()
            remaining = [
                r for r in records
                if self._key_of(r) != key or (predicate is not None and not predicate(r))
            ]
            if len(remaining) == len(records):
                return False
            await self._save(remaining)
        return True

    # ─── File I/O ────────────────────────────────────────

    async def _load(self) -> list[Record]:
        return await asyncio.to_thread(self._read_file)

    async def _save(self, records: list[Record]) -> None:
        await asyncio.to_thread(self._write_file, records)

    def _read_file(self) -> list[Record]:
        """Parse the collection file. A missing file is an empty collection."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(f"{self.name}: cannot read {self.path}: {e}") from e

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"{self.name}: {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"{self.name}: {self.path} must hold a JSON array")
        return data

    def _write_file(self, records: list[Record]) -> None:
        """Atomically replace the collection file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False, default=str)
                    f.write("\n")
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"{self.name}: cannot write {self.path}: {e}") from e
        logger.debug("store.written", store=self.name, records=len(records))
