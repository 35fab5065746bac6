from .layers import BaseStorageLayer, JsonFileStore, MemStore
from .session_store import SessionStore

__all__ = ["BaseStorageLayer", "JsonFileStore", "MemStore", "SessionStore"]
