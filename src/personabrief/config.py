"""Configuration management for PersonaBrief."""

from __future__ import annotations

import os
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(key: str, default: int) -> int:
    """Parse an integer env var, ignoring trailing comments like "30  # seconds"."""
    value = os.getenv(key)
    if not value:
        return default
    value = value.split("#")[0].strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_list(key: str, default: str) -> List[str]:
    raw = os.getenv(key) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config(BaseModel):
    """Application configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default_factory=lambda: os.getenv("PERSONABRIEF_LOG_LEVEL", "INFO"))
    log_json: bool = Field(default_factory=lambda: _env_bool("PERSONABRIEF_LOG_JSON", True))

    # LLM provider settings
    llm_provider: Literal["openai", "local"] = Field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "openai")  # type: ignore
    )
    llm_model: str = Field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))

    # OpenAI
    openai_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))

    # Local LLM (Ollama)
    local_llm_base_url: str = Field(
        default_factory=lambda: os.getenv("LOCAL_LLM_BASE_URL", "http://127.0.0.1:11434")
    )
    local_llm_model: str = Field(default_factory=lambda: os.getenv("LOCAL_LLM_MODEL", "llama3"))

    # ElevenLabs speech synthesis
    elevenlabs_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("ELEVENLABS_API_KEY"))
    # Defaults to the "Sarah" voice
    elevenlabs_voice_id: str = Field(
        default_factory=lambda: os.getenv("ELEVENLABS_VOICE_ID") or "EXAVITQu4vr4xnSDxMaL"
    )
    elevenlabs_model_id: str = Field(
        default_factory=lambda: os.getenv("ELEVENLABS_MODEL_ID") or "eleven_turbo_v2"
    )

    # Pipeline behaviour
    request_timeout_seconds: int = Field(default_factory=lambda: _env_int("REQUEST_TIMEOUT_SECONDS", 30))
    max_retries: int = Field(default_factory=lambda: _env_int("PIPELINE_MAX_RETRIES", 2))

    # HTTP API
    cors_origins: List[str] = Field(
        default_factory=lambda: _env_list("CORS_ORIGINS", "http://localhost:3000")
    )


def get_config() -> Config:
    """Get the application configuration."""
    return Config()
