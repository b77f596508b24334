"""Prompts for the LLM header assist."""

import json
from typing import Any, Sequence

from ..schema import FIELD_DESCRIPTIONS, EntityType

HEADER_MAPPING_SYSTEM_PROMPT = """You map spreadsheet column headers to a fixed canonical schema.

RULES:
1. Return one entry for every input header, in input order. Never skip or add headers.
2. "suggested" must be a canonical field name. If nothing fits, repeat the original header.
3. "confidence" is a number between 0 and 1. Use 0.8 or more only when you are sure.
4. Use the sample values to tell similar fields apart (IDs vs names, numbers vs lists).
5. Respond with a JSON array only. No prose, no markdown.

FORMAT:
[{"original": "<input header>", "suggested": "<canonical field>", "confidence": 0.95}]
"""


def build_header_mapping_prompt(
    headers: Sequence[str],
    entity_type: EntityType,
    sample_records: Sequence[dict[str, Any]],
) -> str:
    """Build the user message for a header mapping request."""
    entity_type = EntityType(entity_type)
    schema = json.dumps(dict(FIELD_DESCRIPTIONS[entity_type]), indent=2)
    samples = json.dumps(list(sample_records), indent=2, default=str)

    return (
        f"ENTITY: {entity_type.value}\n\n"
        f"CANONICAL FIELDS:\n{schema}\n\n"
        f"INPUT HEADERS:\n{json.dumps(list(headers))}\n\n"
        f"SAMPLE RECORDS:\n{samples}"
    )
