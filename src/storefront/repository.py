"""Generic persisted collection with a scoped in-memory view."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from .errors import StorageError
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class Scope:
    """Selects the part of a collection held in memory, e.g. user_id == "alice"."""

    field: str  # entity attribute name
    value: str

    def includes(self, entity: Any) -> bool:
        return getattr(entity, self.field) == self.value


class EntityRepository(Generic[E]):
    """
    A collection persisted as one JSON array under a single storage key.

    Every mutation reads the whole array, changes it and writes it back.
    Two overlapping mutations race and the later write wins.
    """

    storage_key: str = ""
    scope_field: str = "user_id"
    label: str = "entities"

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.items: list[E] = []
        self.scope: Scope | None = None
        self.is_loading = False

    def _decode(self, data: dict[str, Any]) -> E:
        raise NotImplementedError

    def _encode(self, entity: E) -> dict[str, Any]:
        return entity.to_dict()  # type: ignore[attr-defined]

    async def _read_all(self) -> list[E]:
        """
        Read and decode the full collection. A missing key is an empty collection.

        Raises:
            StorageError: If the store fails or the payload cannot be decoded.
        """
        raw = await self.store.get(self.storage_key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            return [self._decode(item) for item in data]
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(self.storage_key, "decode", str(e)) from e

    async def _save(self, entities: list[E], action: str) -> None:
        payload = json.dumps([self._encode(e) for e in entities])
        try:
            await self.store.set(self.storage_key, payload)
        except StorageError:
            logger.error("Failed to %s", action)
            raise
        logger.debug("Saved %d %s after %s", len(entities), self.label, action)

    def _publish(self, entities: list[E], scope: Scope) -> None:
        self.scope = scope
        self.items = [e for e in entities if scope.includes(e)]

    def _refresh_view(self, entities: list[E]) -> None:
        if self.scope is not None:
            self._publish(entities, self.scope)

    async def load_all(self) -> list[E]:
        """Read the unfiltered collection. Storage failures propagate."""
        return await self._read_all()

    async def load_scoped(self, value: str, field: str | None = None) -> list[E]:
        """
        Replace the in-memory view with the entities matching a scope.

        Read failures are logged and leave an empty view; the scope is
        recorded either way.
        """
        scope = Scope(field or self.scope_field, value)
        self.is_loading = True
        try:
            entities = await self._read_all()
        except StorageError as e:
            logger.warning("Failed to load %s for %s=%s: %s", self.label, scope.field, value, e)
            entities = []
        finally:
            self.is_loading = False
        self._publish(entities, scope)
        return list(self.items)

    def clear_scope(self) -> None:
        """Forget the in-memory view without touching persisted data."""
        self.items = []
        self.scope = None

    async def on_session_change(self, username: str | None) -> None:
        if username:
            await self.load_scoped(username)
        else:
            self.clear_scope()

    def find(self, entity_id: str) -> E | None:
        """Look up an entity in the in-memory view."""
        for entity in self.items:
            if entity.id == entity_id:  # type: ignore[attr-defined]
                return entity
        return None

    async def _add(self, entity: E, scope: Scope, action: str) -> E:
        entities = await self._read_all()
        entities.append(entity)
        await self._save(entities, action)
        self._publish(entities, scope)
        return entity

    async def _replace(self, entity_id: str, change: Callable[[E], E], action: str) -> E | None:
        """Apply change to the entity with entity_id. Unknown ids are a no-op returning None."""
        entities = await self._read_all()
        for i, entity in enumerate(entities):
            if entity.id == entity_id:  # type: ignore[attr-defined]
                updated = change(entity)
                entities[i] = updated
                break
        else:
            logger.debug("No %s with id %s; nothing to %s", self.label, entity_id, action)
            return None

        await self._save(entities, action)
        self._refresh_view(entities)
        return updated

    async def delete(self, entity_id: str) -> bool:
        """
        Remove an entity by id.

        Returns:
            True if an entity was removed. Unknown ids are a no-op and skip the write.
        """
        entities = await self._read_all()
        remaining = [e for e in entities if e.id != entity_id]  # type: ignore[attr-defined]
        if len(remaining) == len(entities):
            logger.debug("No %s with id %s; nothing to delete", self.label, entity_id)
            return False

        await self._save(remaining, f"delete {entity_id}")
        self._refresh_view(remaining)
        return True
