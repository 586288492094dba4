"""Document backend persisted as JSON files.

Each key has one master document holding every tag stored for it:

    <root>/<collection>/<sha256(key)>.json
    {"key": "<serialized key>", "tags": {"metadata": "<base64>", ...}}
"""

import base64
import binascii
import hashlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from errors import AlreadyExistsError, BackendError, NotFoundError
from store.base import KeyedStore, encode_value, serialize_key

logger = logging.getLogger(__name__)


class FileStore(KeyedStore):
    """Document store rooted at a directory.

    Writes go through a temp file and os.replace(), so a reader never sees
    a half-written document. Conditional create and delete are serialized by
    a per-instance lock; separate processes sharing a root are not.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._lock = threading.Lock()

    def _doc_path(self, collection: str, key: str) -> Path:
        digest = hashlib.sha256(key.encode('utf-8')).hexdigest()
        return self.root / collection / f'{digest}.json'

    def _load(self, path: Path) -> Optional[dict]:
        try:
            with open(path, encoding='utf-8') as f:
                doc = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise BackendError(f"Error reading document {path}: {e}")
        if not isinstance(doc, dict) or not isinstance(doc.get('tags'), dict):
            raise BackendError(f"Malformed document {path}")
        return doc

    def _save(self, path: Path, doc: dict) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(doc, f)
            os.replace(tmp, path)
        except OSError as e:
            raise BackendError(f"Error writing document {path}: {e}")

    def create(self, collection: str, key: Any, tag: str, value: Any) -> None:
        skey = serialize_key(key)
        data = encode_value(value)
        path = self._doc_path(collection, skey)
        with self._lock:
            doc = self._load(path) or {'key': skey, 'tags': {}}
            if tag in doc['tags']:
                raise AlreadyExistsError(f"Value already exists for key {skey} tag {tag}")
            doc['tags'][tag] = base64.b64encode(data).decode('ascii')
            self._save(path, doc)
        logger.debug(f"Stored {collection}/{skey}/{tag} in {path}")

    def read(self, collection: str, key: Any, tag: str) -> bytes:
        skey = serialize_key(key)
        doc = self._load(self._doc_path(collection, skey))
        if doc is None or tag not in doc['tags']:
            raise NotFoundError(f"No value found for key {skey} tag {tag}")
        return _decode(doc['tags'][tag])

    def delete(self, collection: str, key: Any, tag: str) -> None:
        skey = serialize_key(key)
        path = self._doc_path(collection, skey)
        with self._lock:
            doc = self._load(path)
            if doc is None or tag not in doc['tags']:
                raise NotFoundError(f"No value found for key {skey} tag {tag}")
            del doc['tags'][tag]
            if doc['tags']:
                self._save(path, doc)
            else:
                try:
                    path.unlink()
                except OSError as e:
                    raise BackendError(f"Error removing document {path}: {e}")

    def read_all(self, collection: str, tag: str) -> dict[str, bytes]:
        coll_dir = self.root / collection
        if not coll_dir.is_dir():
            return {}
        result: dict[str, bytes] = {}
        for path in sorted(coll_dir.glob('*.json')):
            doc = self._load(path)
            if doc is None or tag not in doc['tags']:
                continue
            result[doc['key']] = _decode(doc['tags'][tag])
        return result


def _decode(encoded: str) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BackendError(f"Corrupt stored value: {e}")
