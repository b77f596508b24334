"""Human edits and bulk re-runs over a set of pending header checks."""

import logging
from typing import Any, Mapping, Sequence

from ..exceptions import OutOfRangeEditError
from ..schema import EntityType
from .matcher import matches_canonical
from .models import EntityHeaderCheck, MappingSource, RerunResult
from .resolver import MappingResolver

logger = logging.getLogger(__name__)


def edit_header(
    checks: Sequence[EntityHeaderCheck],
    entity: EntityType,
    index: int,
    suggested: str,
) -> list[EntityHeaderCheck]:
    """
    Apply a reviewer's override to one header mapping.

    The edited mapping is always trusted: it becomes valid with confidence
    1.0, and the entity's has_issues flag is recomputed. The input checks are
    left untouched.

    Args:
        checks: Current checks under review
        entity: Entity whose header is edited
        index: 0-based position of the header in the entity's check
        suggested: New canonical name for the header

    Returns:
        A new list of checks with the edit applied

    Raises:
        OutOfRangeEditError: If the entity has no check or the index does not exist
    """
    entity = EntityType(entity)
    target = next((check for check in checks if check.entity == entity), None)

    if target is None:
        raise OutOfRangeEditError(entity.value, index)
    if index < 0 or index >= len(target.headers):
        raise OutOfRangeEditError(entity.value, index, len(target.headers))

    headers = list(target.headers)
    headers[index] = headers[index].model_copy(
        update={
            "suggested": suggested,
            "is_valid": True,
            "confidence": 1.0,
            "source": MappingSource.MANUAL,
        }
    )
    updated = EntityHeaderCheck.build(entity, headers, target.record_count)

    logger.debug(
        f"Edited {entity.value}[{index}]: '{headers[index].original}' -> '{suggested}'"
    )
    return [updated if check.entity == entity else check for check in checks]


async def bulk_rerun(
    checks: Sequence[EntityHeaderCheck],
    collections: Mapping[EntityType, Sequence[dict[str, Any]]],
    resolver: MappingResolver,
) -> RerunResult:
    """
    Re-run the assist for every entity whose headers still fail to match.

    Entities that already match the canonical schema, or that a reviewer has
    already edited to validity, are left untouched. Each re-run replaces the
    entity's check wholesale. A failing entity keeps its previous check and is
    reported in ``failures``; other entities keep their new mappings.
    """
    current = list(checks)
    updated: list[EntityType] = []
    failures: dict[EntityType, str] = {}

    for position, check in enumerate(current):
        records = collections.get(check.entity, [])
        if not records:
            continue
        if matches_canonical(check.entity, check.originals):
            continue
        if check.edited_to_validity:
            logger.debug(f"Skipping re-run for {check.entity.value}: already resolved by hand")
            continue

        try:
            current[position] = await resolver.resolve_with_assist(
                check.entity,
                check.originals,
                records[: resolver.sample_size],
                record_count=len(records),
            )
            updated.append(check.entity)
        except Exception as e:
            logger.error(f"Re-run failed for {check.entity.value}: {e}")
            failures[check.entity] = str(e)

    return RerunResult(checks=current, updated=updated, failures=failures)
