"""Dataset consistency store and its persistence backends."""

from .models import DatasetState, PrioritizationConfig, Priorities, Rule
from .storage import STATE_KEY, InMemoryStateStorage, SQLiteStateStorage, StateStorage
from .store import DatasetStore

__all__ = [
    "DatasetState",
    "PrioritizationConfig",
    "Priorities",
    "Rule",
    "STATE_KEY",
    "InMemoryStateStorage",
    "SQLiteStateStorage",
    "StateStorage",
    "DatasetStore",
]
