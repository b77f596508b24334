"""Local header assists that need no network access."""

import difflib
import re
from typing import Any, Sequence

from ..exceptions import AssistFailure
from ..schema import EntityType, canonical_fields
from .base import DEFAULT_MAX_SAMPLE_SIZE, AssistSuggestion, HeaderAssist


def _squash(name: str) -> str:
    return re.sub(r"[^0-9a-z]", "", name.casefold())


def similarity(header: str, field: str) -> float:
    """
    Score how likely a header names a canonical field, in [0, 1].

    Exact matches after dropping case, spaces and punctuation score 1.0. One
    name containing the other scores at least 0.6, rising with the length
    ratio, so "Priority" still maps strongly to "PriorityLevel".
    """
    a, b = _squash(header), _squash(field)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    score = difflib.SequenceMatcher(None, a, b).ratio()
    if a in b or b in a:
        shorter, longer = sorted((len(a), len(b)))
        score = max(score, 0.6 + 0.4 * shorter / longer)
    return round(min(score, 0.99), 2)


class HeuristicHeaderAssist(HeaderAssist):
    """Greedy string-similarity assignment of headers to canonical fields."""

    name = "heuristic"

    def __init__(self, min_score: float = 0.3):
        self.min_score = min_score

    async def suggest_mapping(
        self,
        headers: Sequence[str],
        entity_type: EntityType,
        sample_records: Sequence[dict[str, Any]],
        max_sample_size: int = DEFAULT_MAX_SAMPLE_SIZE,
    ) -> list[AssistSuggestion]:
        fields = canonical_fields(entity_type)
        pairs = sorted(
            (
                (similarity(header, field), h_index, f_index)
                for h_index, header in enumerate(headers)
                for f_index, field in enumerate(fields)
            ),
            key=lambda pair: (-pair[0], pair[1], pair[2]),
        )

        assigned: dict[int, tuple[str, float]] = {}
        used_fields: set[int] = set()
        for score, h_index, f_index in pairs:
            if score < self.min_score:
                break
            if h_index in assigned or f_index in used_fields:
                continue
            assigned[h_index] = (fields[f_index], score)
            used_fields.add(f_index)

        return [
            AssistSuggestion(
                original=header,
                suggested=assigned.get(index, (header, 0.0))[0],
                confidence=assigned.get(index, (header, 0.0))[1],
            )
            for index, header in enumerate(headers)
        ]


class DisabledHeaderAssist(HeaderAssist):
    """Assist used when suggestions are turned off; every call fails."""

    name = "none"

    async def suggest_mapping(
        self,
        headers: Sequence[str],
        entity_type: EntityType,
        sample_records: Sequence[dict[str, Any]],
        max_sample_size: int = DEFAULT_MAX_SAMPLE_SIZE,
    ) -> list[AssistSuggestion]:
        raise AssistFailure("Header assist is disabled")
