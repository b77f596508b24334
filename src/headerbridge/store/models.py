"""Data models for the dataset store."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..schema import ENTITY_ORDER


class Priorities(BaseModel):
    """Weights used by the downstream allocation stage. No sum constraint."""

    PriorityLevel: float = 40
    Fairness: float = 35
    Fulfillment: float = 25


class Rule(BaseModel):
    """A business rule (co-run, slot restriction, load limit, phase window, ...).

    Rule-specific fields such as ``tasks`` or ``allowedPhases`` are kept as
    extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    name: str
    description: Optional[str] = None


class PrioritizationConfig(BaseModel):
    """Prioritization settings chosen by the user."""

    weights: Priorities = Field(default_factory=Priorities)
    ranking_order: list[str] = Field(
        default_factory=lambda: ["PriorityLevel", "Fairness", "Fulfillment"]
    )
    selected_profile: str = "balanced"
    custom_profiles: dict[str, Priorities] = Field(default_factory=dict)
    pairwise_matrix: Optional[dict[str, dict[str, float]]] = None


class DatasetState(BaseModel):
    """Entity collections plus the rules and weights that apply to them."""

    clients: list[dict[str, Any]] = Field(default_factory=list)
    workers: list[dict[str, Any]] = Field(default_factory=list)
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)
    priorities: Priorities = Field(default_factory=Priorities)
    prioritization_config: PrioritizationConfig = Field(default_factory=PrioritizationConfig)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_data_loaded(self) -> bool:
        """True only while all three collections are non-empty."""
        return bool(self.clients) and bool(self.workers) and bool(self.tasks)

    def summary(self) -> dict[str, Any]:
        """Record counts and load status."""
        counts = {entity.value: len(getattr(self, entity.value)) for entity in ENTITY_ORDER}
        return {
            **counts,
            "rules": len(self.rules),
            "is_data_loaded": self.is_data_loaded,
        }
