"""Shared create/get/delete/list logic for record clients.

Each client owns one collection and one metadata tag of a KeyedStore.
Store-level "not found" is reported with the record's own wording
("no such project: p1"), so callers never see backend messages.
"""

import logging
from typing import Any, Optional

from errors import AlreadyExistsError, BackendError, NotFoundError
from store.base import KeyedStore

logger = logging.getLogger(__name__)


class RecordClient:
    """Base class for clients of one record type.

    Subclasses set collection, tag, record_name and record_class.
    """

    collection = ''
    tag = 'metadata'
    record_name = 'record'
    record_class: Any = dict

    def __init__(self, store: KeyedStore):
        self.store = store

    def _not_found(self, name: str) -> NotFoundError:
        return NotFoundError(f"no such {self.record_name}: {name}")

    def _create(self, key: Any, record: Any, name: str) -> Any:
        # Pre-check with get; the store's own create is the final arbiter
        # when two creates race.
        try:
            self._get(key, name)
        except NotFoundError:
            pass
        else:
            raise AlreadyExistsError(f"{self.record_name} already exists: {name}")

        try:
            self.store.create(self.collection, key, self.tag, record)
        except AlreadyExistsError:
            raise AlreadyExistsError(f"{self.record_name} already exists: {name}")
        logger.info(f"Created {self.record_name} {name}")
        return record

    def _read(self, key: Any, name: str, tag: Optional[str] = None) -> bytes:
        try:
            return self.store.read(self.collection, key, tag or self.tag)
        except NotFoundError:
            raise self._not_found(name) from None

    def _get(self, key: Any, name: str) -> Any:
        return self.store.unmarshal(self._read(key, name), self.record_class)

    def _delete(self, key: Any, name: str, tag: Optional[str] = None) -> None:
        try:
            self.store.delete(self.collection, key, tag or self.tag)
        except NotFoundError:
            raise self._not_found(name) from None
        logger.info(f"Deleted {self.record_name} {name}")

    def _list(self) -> list:
        records = []
        for key, value in self.store.read_all(self.collection, self.tag).items():
            if not value:
                continue
            try:
                records.append(self.store.unmarshal(value, self.record_class))
            except BackendError as e:
                logger.warning(f"Skipping unreadable {self.record_name} {key}: {e}")
        return records
