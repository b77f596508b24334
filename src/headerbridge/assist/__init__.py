"""Header assists: injected capabilities that suggest canonical names."""

from .base import DEFAULT_MAX_SAMPLE_SIZE, AssistSuggestion, HeaderAssist
from .heuristic import DisabledHeaderAssist, HeuristicHeaderAssist, similarity
from .llm_assist import LLMHeaderAssist, parse_suggestions
from .prompts import HEADER_MAPPING_SYSTEM_PROMPT, build_header_mapping_prompt
from .factory import create_assist

__all__ = [
    "DEFAULT_MAX_SAMPLE_SIZE",
    "AssistSuggestion",
    "HeaderAssist",
    "DisabledHeaderAssist",
    "HeuristicHeaderAssist",
    "similarity",
    "LLMHeaderAssist",
    "parse_suggestions",
    "HEADER_MAPPING_SYSTEM_PROMPT",
    "build_header_mapping_prompt",
    "create_assist",
]
