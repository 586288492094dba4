"""Tests for the store package.

The contract tests run against both backends.
"""

import json
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from config import ConfigError, OrchestratorConfig
from errors import AlreadyExistsError, BackendError, NotFoundError
from store import FileStore, MemoryStore, create_store, encode_value, serialize_key


@dataclass
class PairKey:
    name: str = field(metadata={'json': 'rb-name'})
    version: str = field(metadata={'json': 'rb-version'})


@dataclass
class Record:
    name: str
    size: int = 0

    def to_dict(self) -> dict:
        return {'name': self.name, 'size': self.size}

    @classmethod
    def from_dict(cls, data: dict) -> 'Record':
        return cls(name=data['name'], size=data.get('size', 0))


@pytest.fixture(params=['memory', 'file'])
def store(request, tmp_path):
    if request.param == 'memory':
        return MemoryStore()
    return FileStore(tmp_path / 'db')


class TestSerializeKey:
    """Tests for serialize_key()."""

    def test_dataclass_keeps_field_order_and_json_names(self):
        assert serialize_key(PairKey('a', '1')) == '{"rb-name":"a","rb-version":"1"}'

    def test_string_passes_through(self):
        assert serialize_key('plain') == 'plain'

    def test_dict(self):
        assert serialize_key({'project': 'p1'}) == '{"project":"p1"}'

    def test_equal_keys_serialize_equal(self):
        assert serialize_key(PairKey('a', '1')) == serialize_key({'rb-name': 'a', 'rb-version': '1'})

    def test_unsupported(self):
        with pytest.raises(TypeError):
            serialize_key(42)


class TestEncodeValue:
    """Tests for encode_value()."""

    def test_bytes_as_is(self):
        assert encode_value(b'\x00\x01') == b'\x00\x01'

    def test_record_uses_to_dict(self):
        assert json.loads(encode_value(Record('r', 3))) == {'name': 'r', 'size': 3}

    def test_unserializable(self):
        with pytest.raises(BackendError):
            encode_value({'x': object()})


class TestKeyedStoreContract:
    """Behavior both backends must share."""

    def test_create_then_read(self, store):
        store.create('rbdef', PairKey('a', '1'), 'metadata', Record('a', 1))
        data = store.read('rbdef', PairKey('a', '1'), 'metadata')
        assert store.unmarshal(data, Record) == Record('a', 1)

    def test_read_missing_is_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.read('rbdef', PairKey('a', '1'), 'metadata')

    def test_duplicate_create(self, store):
        store.create('c', 'k', 't', {'v': 1})
        with pytest.raises(AlreadyExistsError):
            store.create('c', 'k', 't', {'v': 2})
        assert store.unmarshal(store.read('c', 'k', 't')) == {'v': 1}

    def test_tags_are_independent(self, store):
        store.create('c', 'k', 'metadata', {'v': 1})
        store.create('c', 'k', 'content', b'raw-bytes')
        assert store.read('c', 'k', 'content') == b'raw-bytes'
        store.delete('c', 'k', 'content')
        assert store.unmarshal(store.read('c', 'k', 'metadata')) == {'v': 1}

    def test_delete(self, store):
        store.create('c', 'k', 't', {'v': 1})
        store.delete('c', 'k', 't')
        with pytest.raises(NotFoundError):
            store.read('c', 'k', 't')

    def test_delete_missing(self, store):
        with pytest.raises(NotFoundError):
            store.delete('c', 'k', 't')

    def test_read_all_filters_collection_and_tag(self, store):
        store.create('c', 'k1', 'meta', {'n': 1})
        store.create('c', 'k2', 'meta', {'n': 2})
        store.create('c', 'k2', 'other', {'n': 3})
        store.create('d', 'k3', 'meta', {'n': 4})

        result = store.read_all('c', 'meta')

        assert sorted(result) == ['k1', 'k2']
        assert store.unmarshal(result['k2']) == {'n': 2}

    def test_read_all_empty(self, store):
        assert store.read_all('nothing', 'meta') == {}

    def test_unmarshal_garbage(self, store):
        with pytest.raises(BackendError):
            store.unmarshal(b'not json', Record)

    def test_unmarshal_wrong_shape(self, store):
        with pytest.raises(BackendError):
            store.unmarshal(b'{"size": 1}', Record)

    def test_health_check(self, store):
        store.health_check()
        assert store.read_all('healthcheck', 'healthcheck') == {}

    def test_concurrent_creates_single_winner(self, store):
        results = []

        def attempt(i):
            try:
                store.create('c', 'same', 't', {'writer': i})
                results.append('ok')
            except AlreadyExistsError:
                results.append('exists')

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count('ok') == 1
        assert results.count('exists') == 7


class TestFileStore:
    """FileStore specifics."""

    def test_document_layout(self, tmp_path):
        store = FileStore(tmp_path)
        store.create('rbdef', PairKey('a', '1'), 'metadata', {'v': 1})

        docs = list((tmp_path / 'rbdef').glob('*.json'))
        assert len(docs) == 1
        doc = json.loads(docs[0].read_text())
        assert doc['key'] == '{"rb-name":"a","rb-version":"1"}'
        assert list(doc['tags']) == ['metadata']

    def test_last_tag_removes_document(self, tmp_path):
        store = FileStore(tmp_path)
        store.create('c', 'k', 't', {'v': 1})
        store.delete('c', 'k', 't')
        assert list((tmp_path / 'c').glob('*.json')) == []

    def test_persists_across_instances(self, tmp_path):
        FileStore(tmp_path).create('c', 'k', 't', {'v': 1})
        assert FileStore(tmp_path).unmarshal(FileStore(tmp_path).read('c', 'k', 't')) == {'v': 1}

    def test_corrupt_document(self, tmp_path):
        store = FileStore(tmp_path)
        store.create('c', 'k', 't', {'v': 1})
        doc = next((tmp_path / 'c').glob('*.json'))
        doc.write_text('{broken')

        with pytest.raises(BackendError):
            store.read('c', 'k', 't')


class TestCreateStore:
    """Tests for create_store()."""

    def test_memory(self):
        assert isinstance(create_store(OrchestratorConfig(database_type='memory')), MemoryStore)

    def test_file(self, tmp_path):
        store = create_store(OrchestratorConfig(database_type='file', database_path=tmp_path))
        assert isinstance(store, FileStore)
        assert store.root == tmp_path

    def test_unknown(self):
        config = OrchestratorConfig()
        config.database_type = 'mongo'
        with pytest.raises(ConfigError, match='not supported'):
            create_store(config)
