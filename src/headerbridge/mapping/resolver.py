"""Resolve header mappings with the header assist and a positional fallback."""

import asyncio
import logging
import math
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from ..assist.base import AssistSuggestion, HeaderAssist
from ..config import settings
from ..exceptions import AssistFailure, MalformedAssistResponse
from ..schema import EntityType, canonical_fields
from .matcher import extract_headers, matches_canonical
from .models import (
    FALLBACK_CONFIDENCE,
    VALID_CONFIDENCE_THRESHOLD,
    EntityHeaderCheck,
    HeaderMapping,
    MappingSource,
)

logger = logging.getLogger(__name__)


def identity_mappings(headers: Sequence[str]) -> list[HeaderMapping]:
    """Map every header to itself with full confidence."""
    return [
        HeaderMapping(
            original=header,
            suggested=header,
            is_valid=True,
            confidence=1.0,
            source=MappingSource.EXACT,
        )
        for header in headers
    ]


def positional_mappings(entity: EntityType, headers: Sequence[str]) -> list[HeaderMapping]:
    """
    Pair the i-th header with the i-th canonical field.

    Headers beyond the end of the canonical schema keep their own name. Every
    mapping is marked invalid so a reviewer has to confirm it.
    """
    expected = canonical_fields(entity)
    return [
        HeaderMapping(
            original=header,
            suggested=expected[index] if index < len(expected) else header,
            is_valid=False,
            confidence=FALLBACK_CONFIDENCE,
            source=MappingSource.FALLBACK,
        )
        for index, header in enumerate(headers)
    ]


def mappings_from_suggestions(
    headers: Sequence[str], suggestions: Sequence[AssistSuggestion]
) -> list[HeaderMapping]:
    """
    Validate assist output and convert it into header mappings.

    The output must cover every header exactly once with a non-empty
    suggestion and a confidence in [0, 1]. Mappings are returned in header
    order.

    Raises:
        MalformedAssistResponse: If the output breaks any of these rules
    """
    expected = set(headers)
    by_original: dict[str, AssistSuggestion] = {}

    for suggestion in suggestions:
        if suggestion.original not in expected:
            raise MalformedAssistResponse(
                f"Assist returned unknown header '{suggestion.original}'"
            )
        if suggestion.original in by_original:
            raise MalformedAssistResponse(
                f"Assist returned header '{suggestion.original}' more than once"
            )
        if math.isnan(suggestion.confidence) or not 0.0 <= suggestion.confidence <= 1.0:
            raise MalformedAssistResponse(
                f"Confidence {suggestion.confidence} for '{suggestion.original}' is out of range"
            )
        if not suggestion.suggested.strip():
            raise MalformedAssistResponse(
                f"Assist returned an empty suggestion for '{suggestion.original}'"
            )
        by_original[suggestion.original] = suggestion

    missing = [header for header in headers if header not in by_original]
    if missing:
        raise MalformedAssistResponse(f"Assist response is missing headers: {missing}")

    return [
        HeaderMapping(
            original=header,
            suggested=by_original[header].suggested.strip(),
            is_valid=by_original[header].confidence >= VALID_CONFIDENCE_THRESHOLD,
            confidence=by_original[header].confidence,
            source=MappingSource.ASSIST,
        )
        for header in headers
    ]


class MappingResolver:
    """Produces header mappings for one entity collection."""

    def __init__(
        self,
        assist: Optional[HeaderAssist] = None,
        timeout_seconds: Optional[float] = None,
        sample_size: Optional[int] = None,
    ):
        """
        Initialize the resolver.

        Args:
            assist: Header assist to consult on mismatch (None disables it)
            timeout_seconds: Bound on a single assist call; 0 or less disables it
            sample_size: Number of records passed to the assist as context
        """
        self.assist = assist
        self.timeout_seconds = (
            settings.assist_timeout_seconds if timeout_seconds is None else timeout_seconds
        )
        self.sample_size = settings.assist_sample_size if sample_size is None else sample_size

    async def resolve(
        self,
        entity: EntityType,
        headers: Sequence[str],
        sample: Sequence[dict[str, Any]],
        record_count: Optional[int] = None,
    ) -> EntityHeaderCheck:
        """
        Resolve mappings for an entity's headers. Never raises on assist failure.

        Headers that already match the canonical schema get identity mappings
        without calling the assist. Otherwise the assist is consulted, and any
        failure degrades to low-confidence positional guesses.
        """
        entity = EntityType(entity)
        headers = list(headers)
        count = len(sample) if record_count is None else record_count

        if matches_canonical(entity, headers):
            logger.debug(f"Headers for {entity.value} already match the canonical schema")
            return EntityHeaderCheck.build(entity, identity_mappings(headers), count)

        try:
            return await self.resolve_with_assist(entity, headers, sample, count)
        except AssistFailure as e:
            logger.warning(
                f"Header assist failed for {entity.value}, using positional fallback: {e}"
            )
            return EntityHeaderCheck.build(entity, positional_mappings(entity, headers), count)

    async def resolve_collection(
        self, entity: EntityType, records: Sequence[dict[str, Any]]
    ) -> Optional[EntityHeaderCheck]:
        """Resolve mappings for a whole collection; empty collections get no check."""
        if not records:
            return None
        return await self.resolve(
            entity,
            extract_headers(records),
            records[: self.sample_size],
            record_count=len(records),
        )

    async def resolve_with_assist(
        self,
        entity: EntityType,
        headers: Sequence[str],
        sample: Sequence[dict[str, Any]],
        record_count: Optional[int] = None,
    ) -> EntityHeaderCheck:
        """
        Resolve mappings through the assist only.

        Raises:
            AssistFailure: If the assist is missing, raises or times out
            MalformedAssistResponse: If the assist output fails validation
        """
        entity = EntityType(entity)
        headers = list(headers)
        count = len(sample) if record_count is None else record_count

        if self.assist is None:
            raise AssistFailure("No header assist is configured")

        timeout = self.timeout_seconds if self.timeout_seconds and self.timeout_seconds > 0 else None

        try:
            suggestions = await asyncio.wait_for(
                self.assist.suggest_mapping(
                    headers, entity, list(sample[: self.sample_size]), self.sample_size
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise AssistFailure(
                f"Header assist timed out after {self.timeout_seconds}s for {entity.value}"
            ) from e
        except AssistFailure:
            raise
        except Exception as e:
            raise AssistFailure(f"Header assist raised {type(e).__name__}: {e}") from e

        try:
            suggestions = [
                item if isinstance(item, AssistSuggestion) else AssistSuggestion.model_validate(item)
                for item in suggestions
            ]
        except (TypeError, ValidationError) as e:
            raise MalformedAssistResponse(f"Assist did not return a list of suggestions: {e}") from e

        mappings = mappings_from_suggestions(headers, suggestions)
        logger.info(
            f"Header assist mapped {len(mappings)} header(s) for {entity.value}, "
            f"{sum(1 for m in mappings if not m.is_valid)} need review"
        )
        return EntityHeaderCheck.build(entity, mappings, count)
