"""Local LLM provider (Ollama-compatible HTTP interface)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from personabrief.errors import ResponseParseError
from personabrief.providers.base import (
    DEFAULT_TIMEOUT_SECONDS,
    TextProvider,
    call_with_timeout,
    translate_httpx_error,
)

SERVICE = "Local LLM"


class LocalProvider(TextProvider):
    """
    Local LLM provider using Ollama-compatible HTTP API.

    Compatible with:
    - Ollama (http://localhost:11434)
    - LM Studio
    - Any OpenAI-compatible local server
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:11434",
        default_model: str = "llama3",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @property
    def name(self) -> str:
        return "local"

    def _is_ollama(self) -> bool:
        """Check if the endpoint is Ollama (uses /api/generate)."""
        return "11434" in self.base_url

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> str:
        """Generate text using local LLM."""
        model = model or self.default_model

        if self._is_ollama():
            url = f"{self.base_url}/api/generate"
            payload: Dict[str, Any] = {
                "model": model,
                "prompt": prompt,
                "stream": False,
                "options": {
                    "temperature": temperature,
                    "num_predict": max_tokens,
                },
            }
            if json_mode:
                payload["format"] = "json"
        else:
            url = f"{self.base_url}/v1/chat/completions"
            payload = {
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": temperature,
                "max_tokens": max_tokens,
            }

        data = await call_with_timeout(self._post(url, payload), self.timeout_seconds, SERVICE)

        try:
            if self._is_ollama():
                return data.get("response", "")
            return data["choices"][0]["message"]["content"] or ""
        except (AttributeError, KeyError, IndexError, TypeError) as e:
            raise ResponseParseError(f"{SERVICE} returned an unexpected response body: {e!r}") from e

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise translate_httpx_error(SERVICE, e) from e

        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(f"{SERVICE} returned a non-JSON response body: {e}") from e

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "LocalProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
