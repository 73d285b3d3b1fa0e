"""JSON-file implementation of KeyValueStore.

All records live in one JSON object on disk, the way a device-local
key/value storage keeps them. Writes go to a temporary sibling file that
is then renamed over the existing file so a crash never leaves half a record.
"""

import asyncio
import json
import logging
import os
from pathlib import Path

from domain.model.errors import StorageError

logger = logging.getLogger(__name__)

STORE_PATH = os.getenv('AUTH_STORE_PATH', str(Path.home() / '.authapp' / 'storage.json'))


class FileKeyValueStore:
    def __init__(self, path: str | Path = STORE_PATH):
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    # ── disk access (runs in a worker thread) ────────────────

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("[FILESTORE] Failed to read store", extra={"path": str(self.path), "error": str(e)})
            raise StorageError(f"Failed to read {self.path}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt store file {self.path}")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open('w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("[FILESTORE] Failed to write store", extra={"path": str(self.path), "error": str(e)})
            raise StorageError(f"Failed to write {self.path}") from e

    # ── KeyValueStore implementation ─────────────────────────

    async def get(self, key: str) -> str | None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            data[key] = value
            await asyncio.to_thread(self._write_all, data)
        logger.debug("[FILESTORE] Stored record", extra={"key": key})

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            if key not in data:
                return
            del data[key]
            await asyncio.to_thread(self._write_all, data)
        logger.debug("[FILESTORE] Removed record", extra={"key": key})
