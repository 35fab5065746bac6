import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import fsspec
from pydantic import TypeAdapter, ValidationError

from aidashboard.exceptions import SessionStoreError, StorageError
from aidashboard.settings import StoreSettings
from aidashboard.storage.layers import BaseStorageLayer, JsonFileStore
from aidashboard.types import ChatSession, now_ms
from aidashboard.utilities.logging import get_logger

logger = get_logger("SessionStore")

SessionList = TypeAdapter(List[ChatSession])

# (protocol, path, key) -> store. A file has one writer lock per process.
_FILE_STORES: Dict[Tuple[str, str, str], "SessionStore"] = {}


class SessionStore:
    """
    Chat sessions persisted as one JSON array under a single key.

    Every write loads the whole collection, changes it and saves it back.
    Writes share one lock so concurrent upserts to different sessions
    cannot overwrite each other. Reads take no lock. The lock belongs to
    the store, so use one store per file: `from_settings` hands out the
    same store for the same path.

    Args:
        layer (BaseStorageLayer): where the JSON array is kept.
        key (str): key of the JSON array in the layer.
        clock (Callable[[], int]): epoch millis used for `updated_at`.
    """

    def __init__(
        self,
        layer: BaseStorageLayer,
        key: str = "chat_sessions",
        clock: Callable[[], int] = now_ms,
    ):
        self.layer = layer
        self.key = key
        self.clock = clock
        self._write_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[StoreSettings] = None,
        fs: Optional[fsspec.AbstractFileSystem] = None,
    ) -> "SessionStore":
        """
        The file backed store described by `settings`, shared by every
        caller that asks for the same file and key.
        """
        settings = settings or StoreSettings()
        fs = fs or fsspec.filesystem("file")
        protocol = fs.protocol if isinstance(fs.protocol, str) else fs.protocol[0]
        cache_key = (protocol, settings.store_path, settings.sessions_key)
        store = _FILE_STORES.get(cache_key)
        if store is None:
            layer = JsonFileStore(path=settings.store_path, fs=fs)
            store = _FILE_STORES[cache_key] = cls(layer, key=settings.sessions_key)
        return store

    async def _load(self) -> List[ChatSession]:
        try:
            raw = await asyncio.to_thread(self.layer.get, self.key)
        except StorageError as e:
            raise SessionStoreError(str(e)) from e
        if not raw:
            return []
        try:
            return SessionList.validate_json(raw)
        except ValidationError as e:
            raise SessionStoreError(f"Stored sessions under {self.key!r} are invalid") from e

    async def _save(self, sessions: List[ChatSession]) -> None:
        blob = SessionList.dump_json(sessions, by_alias=True).decode("utf-8")
        await asyncio.to_thread(self.layer.set, self.key, blob)

    async def list_all(self) -> List[ChatSession]:
        return await self._load()

    async def list_recent(self) -> List[ChatSession]:
        """All sessions, most recently updated first."""
        sessions = await self._load()
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    async def get_by_id(self, session_id: str) -> Optional[ChatSession]:
        for session in await self._load():
            if session.id == session_id:
                return session
        return None

    async def get_by_thread_id(self, thread_id: str) -> Optional[ChatSession]:
        for session in await self._load():
            if session.thread_id == thread_id:
                return session
        return None

    async def upsert(self, session: ChatSession) -> ChatSession:
        """
        Replace the stored session with the same id, or append it.

        The stored id is always the thread id. An existing record keeps its
        `created_at`; `updated_at` is set from the clock. Returns the
        record as stored.
        """
        async with self._write_lock:
            sessions = await self._load()
            index = next(
                (i for i, s in enumerate(sessions) if s.id == session.thread_id), None
            )
            created_at = (
                sessions[index].created_at if index is not None else session.created_at
            )
            stored = session.model_copy(
                update={
                    "id": session.thread_id,
                    "created_at": created_at,
                    "updated_at": self.clock(),
                }
            )
            if index is None:
                sessions.append(stored)
            else:
                sessions[index] = stored
            await self._save(sessions)

        logger.debug(f"Saved session {stored.id} ({len(stored.messages)} messages)")
        return stored

    async def delete(self, session_id: str) -> None:
        async with self._write_lock:
            sessions = await self._load()
            await self._save([s for s in sessions if s.id != session_id])

    async def clear(self) -> None:
        async with self._write_lock:
            await self._save([])
