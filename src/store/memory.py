"""In-process key-value backend."""

import logging
import threading
from typing import Any

from errors import AlreadyExistsError, NotFoundError
from store.base import KeyedStore, encode_value, serialize_key

logger = logging.getLogger(__name__)


class MemoryStore(KeyedStore):
    """Flat key-value map keyed by (collection, key, tag).

    create() is a real conditional insert: the existence check and the write
    happen under one lock.
    """

    def __init__(self):
        self._items: dict[tuple[str, str, str], bytes] = {}
        self._lock = threading.Lock()

    def create(self, collection: str, key: Any, tag: str, value: Any) -> None:
        entry = (collection, serialize_key(key), tag)
        data = encode_value(value)
        with self._lock:
            if entry in self._items:
                raise AlreadyExistsError(f"Value already exists for key {entry[1]} tag {tag}")
            self._items[entry] = data
        logger.debug(f"Stored {collection}/{entry[1]}/{tag}")

    def read(self, collection: str, key: Any, tag: str) -> bytes:
        entry = (collection, serialize_key(key), tag)
        with self._lock:
            data = self._items.get(entry)
        if data is None:
            raise NotFoundError(f"No value found for key {entry[1]} tag {tag}")
        return data

    def delete(self, collection: str, key: Any, tag: str) -> None:
        entry = (collection, serialize_key(key), tag)
        with self._lock:
            if self._items.pop(entry, None) is None:
                raise NotFoundError(f"No value found for key {entry[1]} tag {tag}")

    def read_all(self, collection: str, tag: str) -> dict[str, bytes]:
        with self._lock:
            return {
                key: data
                for (coll, key, t), data in self._items.items()
                if coll == collection and t == tag
            }
