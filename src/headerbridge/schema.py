"""Canonical field lists for each entity type."""

from enum import Enum
from types import MappingProxyType
from typing import Union


class EntityType(str, Enum):
    """Entity collections handled by the reconciliation pipeline."""

    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


# Processing order for sessions and commits
ENTITY_ORDER: tuple[EntityType, ...] = (
    EntityType.CLIENTS,
    EntityType.WORKERS,
    EntityType.TASKS,
)

CANONICAL_SCHEMA = MappingProxyType(
    {
        EntityType.CLIENTS: (
            "ClientID",
            "ClientName",
            "PriorityLevel",
            "RequestedTaskIDs",
            "GroupTag",
            "AttributesJSON",
        ),
        EntityType.WORKERS: (
            "WorkerID",
            "WorkerName",
            "Skills",
            "AvailableSlots",
            "MaxLoadPerPhase",
            "WorkerGroup",
            "QualificationLevel",
        ),
        EntityType.TASKS: (
            "TaskID",
            "TaskName",
            "Category",
            "Duration",
            "RequiredSkills",
            "PreferredPhases",
            "MaxConcurrent",
        ),
    }
)

# Short type hints passed to the LLM assist
FIELD_DESCRIPTIONS = MappingProxyType(
    {
        EntityType.CLIENTS: {
            "ClientID": "string - unique identifier",
            "ClientName": "string - name of the client",
            "PriorityLevel": "number (1-5) - priority level, 5 is highest",
            "RequestedTaskIDs": "string - comma-separated task IDs",
            "GroupTag": "string - client group",
            "AttributesJSON": "string - JSON metadata",
        },
        EntityType.WORKERS: {
            "WorkerID": "string - unique identifier",
            "WorkerName": "string - name of the worker",
            "Skills": "string - comma-separated skills",
            "AvailableSlots": "string - array of available phase numbers",
            "MaxLoadPerPhase": "number - maximum tasks per phase",
            "WorkerGroup": "string - worker group",
            "QualificationLevel": "number (1-5) - skill level",
        },
        EntityType.TASKS: {
            "TaskID": "string - unique identifier",
            "TaskName": "string - name of the task",
            "Category": "string - task category",
            "Duration": "number - duration in phases (>=1)",
            "RequiredSkills": "string - comma-separated required skills",
            "PreferredPhases": "string - array or range of preferred phases",
            "MaxConcurrent": "number - maximum concurrent assignments",
        },
    }
)


def canonical_fields(entity: Union[EntityType, str]) -> tuple[str, ...]:
    """Return the canonical field names for an entity type."""
    return CANONICAL_SCHEMA[EntityType(entity)]
