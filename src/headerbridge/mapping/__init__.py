"""Header reconciliation: matching, resolving, editing and committing mappings."""

from .models import (
    FALLBACK_CONFIDENCE,
    VALID_CONFIDENCE_THRESHOLD,
    EntityHeaderCheck,
    HeaderMapping,
    MappingSource,
    RawRecord,
    ReconciliationState,
    RerunResult,
)
from .matcher import extract_headers, headers_match, matches_canonical, normalize_header
from .resolver import MappingResolver, identity_mappings, positional_mappings
from .editor import bulk_rerun, edit_header
from .apply import apply_mappings, commit_mappings, rewrite_record
from .session import (
    commit_session,
    edit_session,
    merge_rerun,
    rerun_session,
    resolve_session,
)

__all__ = [
    "FALLBACK_CONFIDENCE",
    "VALID_CONFIDENCE_THRESHOLD",
    "EntityHeaderCheck",
    "HeaderMapping",
    "MappingSource",
    "RawRecord",
    "ReconciliationState",
    "RerunResult",
    "extract_headers",
    "headers_match",
    "matches_canonical",
    "normalize_header",
    "MappingResolver",
    "identity_mappings",
    "positional_mappings",
    "bulk_rerun",
    "edit_header",
    "apply_mappings",
    "commit_mappings",
    "rewrite_record",
    "commit_session",
    "edit_session",
    "merge_rerun",
    "rerun_session",
    "resolve_session",
]
