"""Document store contract and backends."""

from cmod.store.base import DocumentStore
from cmod.store.json_store import JsonFileStore
from cmod.store.memory_store import MemoryStore

__all__ = ["DocumentStore", "JsonFileStore", "MemoryStore"]
