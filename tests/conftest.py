"""Pytest fixtures for storefront tests."""

import tempfile
from pathlib import Path

import pytest

from storefront.errors import StorageError
from storefront.storage import MemoryStore


class FailingStore(MemoryStore):
    """MemoryStore whose operations can be switched to fail."""

    def __init__(self, initial: dict[str, str] | None = None):
        super().__init__(initial)
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False
        self.fail_set_keys: set[str] = set()
        self.set_calls = 0

    async def get(self, key: str) -> str | None:
        if self.fail_get:
            raise StorageError(key, "get", "disk unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.set_calls += 1
        if self.fail_set or key in self.fail_set_keys:
            raise StorageError(key, "set", "disk full")
        await super().set(key, value)

    async def remove(self, key: str) -> None:
        if self.fail_remove:
            raise StorageError(key, "remove", "disk unavailable")
        await super().remove(key)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    """A store that can be told to fail."""
    return FailingStore()
