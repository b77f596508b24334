"""Create the configured header assist."""

import logging
from typing import Optional

from ..config import Settings, settings as default_settings
from ..llm import AnthropicClient, OpenRouterClient
from .base import HeaderAssist
from .heuristic import DisabledHeaderAssist, HeuristicHeaderAssist
from .llm_assist import LLMHeaderAssist

logger = logging.getLogger(__name__)


def create_assist(settings: Optional[Settings] = None) -> HeaderAssist:
    """Create the header assist selected by ``assist_provider``."""
    settings = settings or default_settings
    provider = settings.assist_provider.strip().lower()

    if provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY is required when ASSIST_PROVIDER is 'anthropic'")
        client = AnthropicClient(
            api_key=settings.anthropic_api_key, timeout=settings.assist_timeout_seconds
        )
        assist = LLMHeaderAssist(client, settings.model_name, settings.assist_max_tokens)
    elif provider == "openrouter":
        if not settings.openrouter_api_key:
            raise ValueError("OPENROUTER_API_KEY is required when ASSIST_PROVIDER is 'openrouter'")
        client = OpenRouterClient(
            api_key=settings.openrouter_api_key, timeout=settings.assist_timeout_seconds
        )
        assist = LLMHeaderAssist(client, settings.openrouter_model, settings.assist_max_tokens)
    elif provider == "heuristic":
        assist = HeuristicHeaderAssist()
    elif provider in ("none", "disabled", ""):
        assist = DisabledHeaderAssist()
    else:
        raise ValueError(f"Unknown assist provider: '{settings.assist_provider}'")

    logger.info(f"Using '{provider or 'none'}' header assist")
    return assist
