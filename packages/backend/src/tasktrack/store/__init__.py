"""Key-indexed record stores.

Learn: Services never touch files directly. They talk to a CollectionStore
(get/put/update/insert_unique/delete/list/find), so the JSON files can
later be swapped for a real embedded database without changing the
service layer.
"""

from tasktrack.store.base import CollectionStore, Record, StoreError
from tasktrack.store.json_file import JsonFileStore
from tasktrack.store.memory import MemoryStore

__all__ = ["CollectionStore", "JsonFileStore", "MemoryStore", "Record", "StoreError"]
