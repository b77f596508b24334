"""Exact/normalized comparison of incoming headers against a canonical schema."""

from typing import Any, Sequence

from ..schema import EntityType, canonical_fields


def normalize_header(header: str) -> str:
    """Case-fold and trim a header for comparison."""
    return header.strip().casefold()


def headers_match(current_headers: Sequence[str], expected_headers: Sequence[str]) -> bool:
    """
    Check whether incoming headers satisfy an expected header list.

    The sequences must have the same length, and every normalized expected
    header must appear somewhere among the normalized current headers. Order
    does not matter. Duplicate current headers are not rejected, so the match
    is not guaranteed to be a bijection.

    Args:
        current_headers: Headers found in the uploaded data
        expected_headers: Canonical header names

    Returns:
        True if the headers match
    """
    if len(current_headers) != len(expected_headers):
        return False

    normalized_current = {normalize_header(header) for header in current_headers}
    return all(normalize_header(expected) in normalized_current for expected in expected_headers)


def matches_canonical(entity: EntityType, current_headers: Sequence[str]) -> bool:
    """Check incoming headers against the canonical schema for an entity."""
    return headers_match(current_headers, canonical_fields(entity))


def extract_headers(records: Sequence[dict[str, Any]]) -> list[str]:
    """Return the header row of a batch, taken from its first record."""
    if not records:
        return []
    return list(records[0].keys())
