import json
import os
from typing import Any, Dict, List, Optional

import fsspec
from pydantic import BaseModel, Field

from aidashboard.exceptions import StorageError


class BaseStorageLayer(BaseModel):
    """
    Preference-style key/value layer: string values under string keys.

    The session store keeps its whole collection as one JSON string under
    a single key, so a layer only needs whole-value get/set/delete.

        layer = JsonFileStore(path="~/.aidashboard/chat_store.json")
        layer.set("chat_sessions", "[]")
        layer.get("chat_sessions")  # -> "[]"
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError("Method not implemented.")

    def set(self, key: str, value: str):
        raise NotImplementedError("Method not implemented.")

    def delete(self, key: str):
        raise NotImplementedError("Method not implemented.")

    def keys(self) -> List[str]:
        raise NotImplementedError("Method not implemented.")


class MemStore(BaseStorageLayer):
    """
    Simple in memory storage layer.
    """

    core: Dict[str, str] = Field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.core.get(key, None)

    def set(self, key: str, value: str):
        self.core[key] = value

    def delete(self, key: str):
        self.core.pop(key, None)

    def keys(self) -> List[str]:
        return list(self.core.keys())


class JsonFileStore(BaseStorageLayer):
    """
    One JSON document of key -> string on an fsspec filesystem.
    Every write rewrites the document through a temporary file.
    """

    path: str
    fs: Any = Field(default_factory=lambda: fsspec.filesystem("file"), exclude=True)

    model_config = dict(arbitrary_types_allowed=True)

    def model_post_init(self, __context: Any) -> None:
        self.path = os.path.expanduser(self.path)

    def _read(self) -> Dict[str, str]:
        if not self.fs.exists(self.path):
            return {}
        with self.fs.open(self.path, "r", encoding="utf-8") as f:
            raw = f.read()
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"{self.path} is not valid JSON") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]):
        dirpath = os.path.dirname(self.path)
        if dirpath and not self.fs.exists(dirpath):
            self.fs.makedirs(dirpath, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        with self.fs.open(tmp_path, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, ensure_ascii=False))
        self.fs.mv(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key, None)

    def set(self, key: str, value: str):
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str):
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> List[str]:
        return list(self._read().keys())
