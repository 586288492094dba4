"""KeyedStore contract and shared helpers.

Records are stored under (collection, key, tag). Keys are opaque strings
produced by serialize_key() from a small key-identity dataclass, so two keys
are equal exactly when their JSON forms are equal. A tag names one sub-field
of the key's entry (e.g. 'metadata' and 'content' for a bundle definition).
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, fields, is_dataclass
from typing import Any

from errors import BackendError

logger = logging.getLogger(__name__)


def serialize_key(key: Any) -> str:
    """Serialize a key-identity struct to its canonical string form.

    Dataclass fields keep declaration order; a field's JSON name can be set
    with field(metadata={'json': '...'}). Strings pass through unchanged.
    """
    if isinstance(key, str):
        return key
    if is_dataclass(key) and not isinstance(key, type):
        data = {f.metadata.get('json', f.name): getattr(key, f.name) for f in fields(key)}
    elif isinstance(key, dict):
        data = key
    else:
        raise TypeError(f"Unsupported key type: {type(key).__name__}")
    return json.dumps(data, separators=(',', ':'))


def encode_value(value: Any) -> bytes:
    """Encode a value for storage.

    bytes are stored as-is; records with to_dict() and other dataclasses are
    stored as JSON; anything else must be JSON-serializable.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if hasattr(value, 'to_dict'):
        value = value.to_dict()
    elif is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    try:
        return json.dumps(value).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise BackendError(f"Cannot serialize {type(value).__name__}: {e}")


class KeyedStore(ABC):
    """Backend-agnostic persistence over composite keys and tags.

    Existence checks done by callers (get before create) are not atomic with
    the following create; backends that can, make create itself conditional.
    """

    @abstractmethod
    def create(self, collection: str, key: Any, tag: str, value: Any) -> None:
        """Store value under (collection, key, tag).

        Raises:
            AlreadyExistsError: If a value already exists for the triple
            BackendError: On backend failure
        """

    @abstractmethod
    def read(self, collection: str, key: Any, tag: str) -> bytes:
        """Read the value stored under (collection, key, tag).

        Raises:
            NotFoundError: If nothing is stored
            BackendError: On backend failure
        """

    @abstractmethod
    def delete(self, collection: str, key: Any, tag: str) -> None:
        """Delete the value stored under (collection, key, tag).

        Raises:
            NotFoundError: If nothing is stored
            BackendError: On backend failure
        """

    @abstractmethod
    def read_all(self, collection: str, tag: str) -> dict[str, bytes]:
        """Return {key: value} for every key in collection that has tag."""

    def unmarshal(self, data: bytes, cls: Any = dict) -> Any:
        """Decode stored bytes into a record.

        Args:
            data: Bytes returned by read()
            cls: dict, or a record class with from_dict()

        Raises:
            BackendError: If data is not valid JSON for cls
        """
        try:
            obj = json.loads(data)
        except (TypeError, ValueError) as e:
            raise BackendError(f"Unmarshaling stored value: {e}")
        if cls is dict:
            return obj
        try:
            return cls.from_dict(obj)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise BackendError(f"Unmarshaling {getattr(cls, '__name__', cls)}: {e}")

    def health_check(self) -> None:
        """Verify the backend accepts writes and deletes.

        Raises:
            BackendError: If the store is unusable
        """
        probe = str(uuid.uuid4())
        try:
            self.create('healthcheck', probe, 'healthcheck', {'test': 'healthcheck'})
            self.delete('healthcheck', probe, 'healthcheck')
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Cannot talk to datastore: {e}")
        logger.debug("Store health check passed")
