"""Keyed persistence behind a swappable backend."""

import logging

from config import ConfigError, OrchestratorConfig
from store.base import KeyedStore, encode_value, serialize_key
from store.filestore import FileStore
from store.memory import MemoryStore

logger = logging.getLogger(__name__)


def create_store(config: OrchestratorConfig) -> KeyedStore:
    """Create the store backend selected by config.database_type.

    Raises:
        ConfigError: If the backend type is unknown
    """
    if config.database_type == 'memory':
        logger.debug("Using in-memory store")
        return MemoryStore()
    if config.database_type == 'file':
        logger.debug(f"Using file store at {config.database_path}")
        return FileStore(config.database_path)
    raise ConfigError(f"{config.database_type} DB not supported")


__all__ = [
    "KeyedStore",
    "MemoryStore",
    "FileStore",
    "create_store",
    "serialize_key",
    "encode_value",
]
