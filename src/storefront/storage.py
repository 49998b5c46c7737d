"""Persistent key-value stores for storefront."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from .errors import StorageError

logger = logging.getLogger(__name__)

# Local data directory within the storefront project
# Can be overridden via STOREFRONT_DATA_DIR environment variable
_default_data_dir = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.environ.get("STOREFRONT_DATA_DIR", _default_data_dir))


class KeyValueStore(Protocol):
    """Asynchronous string store. A missing key reads as None, never as an error."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store. Contents live only as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileStore:
    """Stores each key as one file under a data directory."""

    def __init__(self, data_dir: Path | None = None):
        """
        Initialize FileStore.

        Args:
            data_dir: Override data directory (for testing).
        """
        self.data_dir = data_dir or DATA_DIR

    def _path_for(self, key: str) -> Path:
        if not key or key.startswith(".") or "/" in key or os.sep in key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.data_dir / key

    def _read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def _write(self, key: str, value: str) -> None:
        """Write atomically via write-to-temp-then-rename."""
        path = self._path_for(key)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(temp_path, path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._read, key)
        except UnicodeDecodeError as e:
            raise StorageError(key, "decode", str(e)) from e
        except OSError as e:
            raise StorageError(key, "get", str(e)) from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as e:
            raise StorageError(key, "set", str(e)) from e
        logger.debug("Wrote %d bytes to %s", len(value), key)

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove, key)
        except OSError as e:
            raise StorageError(key, "remove", str(e)) from e
