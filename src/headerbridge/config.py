"""Configuration management for HeaderBridge."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Database path for persisted dataset state
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/headerbridge.db"))

    # Header assist provider ('anthropic', 'openrouter', 'heuristic' or 'none')
    assist_provider: str = os.getenv("ASSIST_PROVIDER", "heuristic")

    # Anthropic API key (required when ASSIST_PROVIDER=anthropic)
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

    # OpenRouter API configuration (required when ASSIST_PROVIDER=openrouter)
    openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3-haiku")

    # Model used for Anthropic header suggestions
    model_name: str = os.getenv("MODEL_NAME", "claude-3-5-haiku-20241022")
    assist_max_tokens: int = int(os.getenv("ASSIST_MAX_TOKENS", "1024"))

    # Assist call limits
    assist_timeout_seconds: float = float(os.getenv("ASSIST_TIMEOUT_SECONDS", "30"))
    assist_sample_size: int = int(os.getenv("ASSIST_SAMPLE_SIZE", "3"))

    # Resolve entities with concurrent assist calls instead of one at a time
    resolve_concurrently: bool = os.getenv("RESOLVE_CONCURRENTLY", "false").lower() == "true"

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()


settings = Settings()
