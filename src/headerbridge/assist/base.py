"""Header assist interface."""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from pydantic import BaseModel

from ..schema import EntityType

DEFAULT_MAX_SAMPLE_SIZE = 3


class AssistSuggestion(BaseModel):
    """One suggestion returned by a header assist."""

    original: str
    suggested: str
    confidence: float


class HeaderAssist(ABC):
    """Abstract base class for header mapping assists.

    Implementations may raise any exception; the mapping resolver treats every
    failure as a reason to fall back to positional guesses.
    """

    name: str = "assist"

    @abstractmethod
    async def suggest_mapping(
        self,
        headers: Sequence[str],
        entity_type: EntityType,
        sample_records: Sequence[dict[str, Any]],
        max_sample_size: int = DEFAULT_MAX_SAMPLE_SIZE,
    ) -> list[AssistSuggestion]:
        """Suggest a canonical field name for every header, with a confidence in [0, 1]."""
        pass
