"""In-memory dataset store with best-effort persistence."""

import copy
import logging
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from ..schema import EntityType
from .models import DatasetState, PrioritizationConfig, Priorities, Rule
from .storage import STATE_KEY, SQLiteStateStorage, StateStorage

logger = logging.getLogger(__name__)


class DatasetStore:
    """
    Single owner of the dataset state.

    All mutations go through the setters below. ``is_data_loaded`` is derived
    from the three collections after every mutation, and any mutation that
    leaves the dataset loaded is persisted. Persistence is best effort: read
    and write failures are logged, never raised, and never undo an in-memory
    change.
    """

    def __init__(self, storage: Optional[StateStorage] = None, key: str = STATE_KEY):
        """
        Initialize the store.

        Args:
            storage: Backend for the serialized state (SQLite if not provided)
            key: Storage key holding the state
        """
        self.storage = storage or SQLiteStateStorage()
        self.key = key
        self._state = DatasetState()
        self._storage_ready = False

    async def initialize(self):
        """Open storage and restore any previously persisted state."""
        try:
            await self.storage.initialize()
            self._storage_ready = True
        except Exception as e:
            logger.error(f"State storage unavailable, continuing in memory only: {e}")
            return
        await self.load()

    async def close(self):
        """Close the storage backend."""
        await self.storage.close()
        self._storage_ready = False

    # Read access

    @property
    def state(self) -> DatasetState:
        """A copy of the current state."""
        return self._state.model_copy(deep=True)

    @property
    def is_data_loaded(self) -> bool:
        return self._state.is_data_loaded

    def collection(self, entity: EntityType) -> list[dict[str, Any]]:
        """A copy of one entity collection."""
        return copy.deepcopy(getattr(self._state, EntityType(entity).value))

    # Collection setters

    async def set_clients(self, clients: Sequence[dict[str, Any]]):
        await self.set_collection(EntityType.CLIENTS, clients)

    async def set_workers(self, workers: Sequence[dict[str, Any]]):
        await self.set_collection(EntityType.WORKERS, workers)

    async def set_tasks(self, tasks: Sequence[dict[str, Any]]):
        await self.set_collection(EntityType.TASKS, tasks)

    async def set_collection(self, entity: EntityType, records: Sequence[dict[str, Any]]):
        """Replace one entity collection."""
        entity = EntityType(entity)
        await self._update({entity.value: [dict(record) for record in records]})

    async def apply_modification(
        self,
        clients: Optional[Sequence[dict[str, Any]]] = None,
        workers: Optional[Sequence[dict[str, Any]]] = None,
        tasks: Optional[Sequence[dict[str, Any]]] = None,
    ):
        """Replace any subset of the collections in a single mutation."""
        changes = {
            name: [dict(record) for record in records]
            for name, records in (("clients", clients), ("workers", workers), ("tasks", tasks))
            if records is not None
        }
        if changes:
            await self._update(changes)

    # Configuration setters

    async def set_rules(self, rules: Sequence[Rule]):
        await self._update({"rules": [Rule.model_validate(rule) for rule in rules]})

    async def set_priorities(self, priorities: Priorities):
        await self._update({"priorities": Priorities.model_validate(priorities)})

    async def set_prioritization_config(self, config: PrioritizationConfig):
        await self._update(
            {"prioritization_config": PrioritizationConfig.model_validate(config)}
        )

    async def clear(self):
        """Reset to the empty default and erase persisted state."""
        self._state = DatasetState()
        if not self._storage_ready:
            return
        try:
            await self.storage.clear(self.key)
            logger.info("Cleared persisted dataset state")
        except Exception as e:
            logger.error(f"Failed to clear persisted dataset state: {e}")

    # Persistence

    async def save(self) -> bool:
        """Persist the full state. Returns False if the write failed."""
        if not self._storage_ready:
            logger.warning("State storage is not initialized, skipping persist")
            return False
        try:
            await self.storage.write(self.key, self._state.model_dump_json())
        except Exception as e:
            logger.error(f"Failed to persist dataset state: {e}")
            return False
        logger.debug(f"Persisted dataset state: {self._state.summary()}")
        return True

    async def load(self) -> bool:
        """Restore persisted state. Returns False and keeps the current state on failure."""
        if not self._storage_ready:
            return False
        try:
            payload = await self.storage.read(self.key)
        except Exception as e:
            logger.warning(f"Failed to read persisted dataset state: {e}")
            return False

        if payload is None:
            return False

        try:
            restored = DatasetState.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Ignoring corrupt persisted dataset state: {e}")
            return False

        self._state = restored
        logger.info(f"Restored dataset state: {restored.summary()}")
        return True

    async def _update(self, changes: dict[str, Any]):
        self._state = self._state.model_copy(update=changes)
        if self._state.is_data_loaded:
            await self.save()
