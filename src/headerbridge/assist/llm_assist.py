"""Header assist backed by an LLM client."""

import asyncio
import json
import logging
import re
from typing import Any, Sequence

from pydantic import TypeAdapter, ValidationError

from ..exceptions import MalformedAssistResponse
from ..llm import LLMClient
from ..schema import EntityType
from .base import DEFAULT_MAX_SAMPLE_SIZE, AssistSuggestion, HeaderAssist
from .prompts import HEADER_MAPPING_SYSTEM_PROMPT, build_header_mapping_prompt

logger = logging.getLogger(__name__)

_SUGGESTIONS = TypeAdapter(list[AssistSuggestion])
_CODE_FENCE = re.compile(r"```(?:json)?")
_DECODER = json.JSONDecoder()


def parse_suggestions(text: str) -> list[AssistSuggestion]:
    """
    Extract the JSON array of suggestions from a model reply.

    Markdown fences are dropped, then every ``[`` is tried as the start of a
    JSON value. The first array that validates as suggestions wins, so stray
    brackets in surrounding prose are skipped.

    Raises:
        MalformedAssistResponse: If no parsable array of suggestions is found
    """
    cleaned = _CODE_FENCE.sub("", text or "")
    error = "No JSON array found in assist response"

    start = cleaned.find("[")
    while start != -1:
        try:
            data, _ = _DECODER.raw_decode(cleaned, start)
            return _SUGGESTIONS.validate_python(data)
        except json.JSONDecodeError as e:
            error = f"Assist response is not valid JSON: {e}"
        except ValidationError as e:
            error = f"Assist response has unexpected shape: {e}"
        start = cleaned.find("[", start + 1)

    raise MalformedAssistResponse(error)


class LLMHeaderAssist(HeaderAssist):
    """Asks an LLM to map headers onto the canonical schema."""

    name = "llm"

    def __init__(self, client: LLMClient, model: str, max_tokens: int = 1024):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def suggest_mapping(
        self,
        headers: Sequence[str],
        entity_type: EntityType,
        sample_records: Sequence[dict[str, Any]],
        max_sample_size: int = DEFAULT_MAX_SAMPLE_SIZE,
    ) -> list[AssistSuggestion]:
        prompt = build_header_mapping_prompt(
            headers, entity_type, list(sample_records)[:max_sample_size]
        )

        # LLM clients are synchronous; keep the event loop free while waiting
        response = await asyncio.to_thread(
            self.client.create_message,
            messages=[{"role": "user", "content": prompt}],
            system=HEADER_MAPPING_SYSTEM_PROMPT,
            max_tokens=self.max_tokens,
            model=self.model,
        )

        if response.usage:
            logger.info(
                f"Header assist call for {EntityType(entity_type).value}: "
                f"{response.usage.get('input_tokens', 0)} in / "
                f"{response.usage.get('output_tokens', 0)} out tokens"
            )

        return parse_suggestions(response.text)
