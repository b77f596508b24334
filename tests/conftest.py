"""Pytest configuration and shared fixtures."""

import asyncio
from pathlib import Path
from typing import Any, AsyncGenerator, Sequence

import pytest
import pytest_asyncio

from headerbridge.assist import AssistSuggestion, HeaderAssist
from headerbridge.config import Settings
from headerbridge.mapping import MappingResolver
from headerbridge.schema import EntityType
from headerbridge.store import DatasetStore, InMemoryStateStorage, StateStorage


class StubAssist(HeaderAssist):
    """Assist returning canned suggestions and recording every call."""

    name = "stub"

    def __init__(self, responses: dict[EntityType, list[tuple[str, str, float]]] = None):
        self.responses = responses or {}
        self.calls: list[tuple[list[str], EntityType, list[dict[str, Any]]]] = []

    async def suggest_mapping(self, headers, entity_type, sample_records, max_sample_size=3):
        self.calls.append((list(headers), entity_type, list(sample_records)))
        triples = self.responses[EntityType(entity_type)]
        return [
            AssistSuggestion(original=original, suggested=suggested, confidence=confidence)
            for original, suggested, confidence in triples
        ]


class GatedAssist(StubAssist):
    """Stub assist that blocks on ``gate`` once it is closed."""

    name = "gated"

    def __init__(self, responses: dict[EntityType, list[tuple[str, str, float]]] = None):
        super().__init__(responses)
        self.gate = asyncio.Event()
        self.gate.set()
        self.entered = asyncio.Event()

    async def suggest_mapping(self, headers, entity_type, sample_records, max_sample_size=3):
        self.entered.set()
        await self.gate.wait()
        return await super().suggest_mapping(headers, entity_type, sample_records, max_sample_size)


class FailingAssist(HeaderAssist):
    """Assist that always raises."""

    name = "failing"

    def __init__(self, error: Exception = None):
        self.error = error or RuntimeError("assist unavailable")
        self.calls = 0

    async def suggest_mapping(self, headers, entity_type, sample_records, max_sample_size=3):
        self.calls += 1
        raise self.error


class SlowAssist(HeaderAssist):
    """Assist that never answers within a short timeout."""

    name = "slow"

    async def suggest_mapping(self, headers, entity_type, sample_records, max_sample_size=3):
        await asyncio.sleep(10)
        return []


class BrokenStorage(StateStorage):
    """Storage whose reads and writes always fail."""

    def __init__(self):
        self.write_attempts = 0

    async def read(self, key: str):
        raise OSError("disk unavailable")

    async def write(self, key: str, payload: str) -> None:
        self.write_attempts += 1
        raise OSError("disk full")

    async def clear(self, key: str) -> None:
        raise OSError("disk unavailable")


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create settings with test values."""
    return Settings(
        database_path=tmp_path / "test.db",
        assist_provider="heuristic",
        anthropic_api_key="test-key-123",
        model_name="claude-3-5-haiku-20241022",
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
    )


@pytest.fixture
def messy_clients() -> list[dict[str, Any]]:
    """Client records whose headers do not match the canonical schema."""
    return [
        {
            "Client ID": "C1",
            "Client Name": "Acme Corp",
            "Priority": 3,
            "Tasks": "T1,T2",
            "Group": "GroupA",
            "Attrs": '{"location": "NY"}',
        },
        {
            "Client ID": "C2",
            "Client Name": "Globex",
            "Priority": 5,
            "Tasks": "T3",
            "Group": "GroupB",
            "Attrs": "{}",
        },
    ]


@pytest.fixture
def messy_client_responses() -> dict[EntityType, list[tuple[str, str, float]]]:
    """Assist output for the messy client headers."""
    return {
        EntityType.CLIENTS: [
            ("Client ID", "ClientID", 0.95),
            ("Client Name", "ClientName", 0.9),
            ("Priority", "Priority", 0.4),
            ("Tasks", "RequestedTaskIDs", 0.85),
            ("Group", "GroupTag", 0.99),
            ("Attrs", "Attrs", 0.3),
        ]
    }


@pytest.fixture
def canonical_workers() -> list[dict[str, Any]]:
    return [
        {
            "WorkerID": "W1",
            "WorkerName": "Ada",
            "Skills": "python,sql",
            "AvailableSlots": "[1,2,3]",
            "MaxLoadPerPhase": 2,
            "WorkerGroup": "GroupA",
            "QualificationLevel": 4,
        }
    ]


@pytest.fixture
def canonical_tasks() -> list[dict[str, Any]]:
    return [
        {
            "TaskID": "T1",
            "TaskName": "Data cleanup",
            "Category": "ETL",
            "Duration": 2,
            "RequiredSkills": "python",
            "PreferredPhases": "1-3",
            "MaxConcurrent": 1,
        }
    ]


@pytest.fixture
def memory_storage() -> InMemoryStateStorage:
    return InMemoryStateStorage()


@pytest_asyncio.fixture
async def store(memory_storage: InMemoryStateStorage) -> AsyncGenerator[DatasetStore, None]:
    """Create an initialized store backed by in-memory storage."""
    dataset_store = DatasetStore(storage=memory_storage)
    await dataset_store.initialize()
    yield dataset_store
    await dataset_store.close()


def make_resolver(assist: HeaderAssist = None, timeout_seconds: float = 5.0) -> MappingResolver:
    return MappingResolver(assist, timeout_seconds=timeout_seconds, sample_size=3)


def collections_of(
    clients: Sequence[dict] = (), workers: Sequence[dict] = (), tasks: Sequence[dict] = ()
) -> dict[EntityType, list[dict]]:
    return {
        EntityType.CLIENTS: list(clients),
        EntityType.WORKERS: list(workers),
        EntityType.TASKS: list(tasks),
    }
