"""Base provider interfaces and shared call-boundary helpers."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Optional, TypeVar

import httpx

from personabrief.errors import (
    UpstreamAuthError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamRateLimitError,
    UpstreamRequestError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from personabrief.schemas import AudioResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0


class TextProvider(ABC):
    """
    Abstract base class for text generation providers.

    Implementations must raise UpstreamError subclasses for remote
    failures so the retry layer can tell transient conditions from
    permanent ones.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name."""
        ...

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> str:
        """
        Generate text from a prompt.

        Args:
            prompt: The input prompt
            model: Model name override (uses default if None)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            json_mode: Ask the backend for a JSON object if it supports it

        Returns:
            Raw generated text (may still carry markdown fences)
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        return None


class SpeechProvider(ABC):
    """Abstract base class for speech synthesis providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name."""
        ...

    @abstractmethod
    async def synthesize(self, script: str) -> AudioResult:
        """
        Synthesize a spoken version of the script.

        Raises:
            SpeechValidationError: if the script is empty
            UpstreamError: on remote failure
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        return None


def _drain(task: "asyncio.Future[object]") -> None:
    # Retrieve the result of an abandoned call so asyncio does not warn about it
    if not task.cancelled():
        task.exception()


async def call_with_timeout(awaitable: Awaitable[T], timeout_seconds: float, service: str) -> T:
    """
    Race a remote call against a timer.

    Whichever settles first decides the outcome. On timeout the caller stops
    waiting but the in-flight request is left to finish on its own.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        task.add_done_callback(_drain)
        logger.warning("%s call abandoned after %ss", service, timeout_seconds)
        raise UpstreamTimeoutError(service, timeout_seconds) from None


def error_for_status(service: str, status_code: int, detail: str = "") -> UpstreamError:
    """Map an HTTP status from a remote service to an upstream error."""
    if status_code in (401, 403):
        return UpstreamAuthError(service)
    if status_code == 408:
        return UpstreamTimeoutError(service)
    if status_code == 429:
        return UpstreamRateLimitError(service)
    if status_code >= 500:
        return UpstreamUnavailableError(service, status_code)
    return UpstreamRequestError(service, status_code, detail)


def translate_httpx_error(service: str, error: httpx.HTTPError) -> UpstreamError:
    """Map an httpx transport or status error to an upstream error."""
    if isinstance(error, httpx.TimeoutException):
        return UpstreamTimeoutError(service)
    if isinstance(error, httpx.HTTPStatusError):
        detail = error.response.text[:200] if error.response is not None else ""
        return error_for_status(service, error.response.status_code, detail)
    if isinstance(error, (httpx.NetworkError, httpx.ProtocolError)):
        return UpstreamConnectionError(service, type(error).__name__)
    return UpstreamConnectionError(service, str(error))
