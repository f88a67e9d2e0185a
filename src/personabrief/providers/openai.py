"""OpenAI text provider implementation using the official OpenAI SDK."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from personabrief.errors import (
    ResponseParseError,
    UpstreamAuthError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from personabrief.providers.base import (
    DEFAULT_TIMEOUT_SECONDS,
    TextProvider,
    call_with_timeout,
    error_for_status,
)

logger = logging.getLogger(__name__)

SERVICE = "OpenAI"


class OpenAIProvider(TextProvider):
    """
    OpenAI API provider using the async OpenAI Python SDK.

    SDK-level retries are disabled; retrying is the pipeline's job.
    """

    # Models that don't support custom temperature (only default=1)
    NO_TEMPERATURE_MODELS = ("gpt-5", "o1", "o3")

    def __init__(
        self,
        api_key: Optional[str],
        default_model: str = "gpt-4o-mini",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds
        self._client = client

        if self._client is None:
            if api_key:
                self._client = AsyncOpenAI(
                    api_key=api_key,
                    timeout=timeout_seconds,
                    max_retries=0,
                )
            else:
                logger.warning("OPENAI_API_KEY not configured")

    @property
    def name(self) -> str:
        return "openai"

    def _supports_temperature(self, model: str) -> bool:
        """Check if model supports custom temperature values."""
        model_lower = model.lower()
        return not any(model_lower.startswith(prefix) for prefix in self.NO_TEMPERATURE_MODELS)

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> str:
        """Generate text using OpenAI chat completion."""
        if self._client is None:
            raise UpstreamAuthError(SERVICE)

        model = model or self.default_model

        # Build kwargs - only include temperature if model supports it
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_completion_tokens": max_tokens,
        }
        if self._supports_temperature(model):
            kwargs["temperature"] = temperature
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await call_with_timeout(
                self._client.chat.completions.create(**kwargs),
                self.timeout_seconds,
                SERVICE,
            )
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise ResponseParseError(f"{SERVICE} returned a completion without choices: {e!r}") from e

    def _translate_error(self, error: openai.OpenAIError) -> UpstreamError:
        # APITimeoutError subclasses APIConnectionError, so check it first
        if isinstance(error, openai.APITimeoutError):
            return UpstreamTimeoutError(SERVICE, self.timeout_seconds)
        if isinstance(error, openai.APIConnectionError):
            return UpstreamConnectionError(SERVICE, type(error).__name__)
        if isinstance(error, openai.APIStatusError):
            return error_for_status(SERVICE, error.status_code, error.message[:200])
        return UpstreamConnectionError(SERVICE, str(error))

    async def aclose(self) -> None:
        """Close the OpenAI client."""
        if self._client is not None:
            await self._client.close()

    async def __aenter__(self) -> "OpenAIProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
