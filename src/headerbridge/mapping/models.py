"""Data models for header reconciliation."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..schema import ENTITY_ORDER, EntityType

# Confidence at or above which an assist suggestion is accepted without review
VALID_CONFIDENCE_THRESHOLD = 0.8

# Confidence given to positional guesses when the assist is unavailable
FALLBACK_CONFIDENCE = 0.5

RawRecord = dict[str, Any]


class MappingSource(str, Enum):
    """How a suggested header name was produced."""

    EXACT = "exact"  # Headers already matched the canonical schema
    ASSIST = "assist"  # Suggested by the header assist
    FALLBACK = "fallback"  # Positional guess after an assist failure
    MANUAL = "manual"  # Set by a human reviewer


class HeaderMapping(BaseModel):
    """Mapping of one original column header to a canonical field name."""

    original: str
    suggested: str
    is_valid: bool
    confidence: float = Field(ge=0.0, le=1.0)
    source: MappingSource = MappingSource.ASSIST


class EntityHeaderCheck(BaseModel):
    """Header mappings for one entity collection under review."""

    entity: EntityType
    headers: list[HeaderMapping]
    has_issues: bool
    record_count: int

    @classmethod
    def build(
        cls, entity: EntityType, headers: list[HeaderMapping], record_count: int
    ) -> "EntityHeaderCheck":
        """Create a check with has_issues derived from its headers."""
        return cls(
            entity=entity,
            headers=headers,
            has_issues=any(not header.is_valid for header in headers),
            record_count=record_count,
        )

    @property
    def originals(self) -> list[str]:
        return [header.original for header in self.headers]

    @property
    def edited_to_validity(self) -> bool:
        """True when a reviewer has resolved every outstanding issue by hand."""
        return not self.has_issues and any(
            header.source == MappingSource.MANUAL for header in self.headers
        )


class ReconciliationState(BaseModel):
    """Draft header checks for one reconciliation session.

    Transitions in ``headerbridge.mapping.session`` never mutate a state;
    they return a new one.
    """

    draft: list[EntityHeaderCheck] = Field(default_factory=list)
    committed: bool = False

    def check_for(self, entity: EntityType) -> Optional[EntityHeaderCheck]:
        for check in self.draft:
            if check.entity == entity:
                return check
        return None

    @property
    def has_any_issues(self) -> bool:
        return any(check.has_issues for check in self.draft)

    @property
    def all_resolved(self) -> bool:
        return bool(self.draft) and not self.has_any_issues

    @property
    def total_records(self) -> int:
        return sum(check.record_count for check in self.draft)


class RerunResult(BaseModel):
    """Outcome of a bulk re-run: updated checks plus per-entity failures."""

    checks: list[EntityHeaderCheck]
    updated: list[EntityType] = Field(default_factory=list)
    failures: dict[EntityType, str] = Field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures


def sort_checks(checks: list[EntityHeaderCheck]) -> list[EntityHeaderCheck]:
    """Order checks by the fixed entity processing order."""
    return sorted(checks, key=lambda check: ENTITY_ORDER.index(check.entity))
