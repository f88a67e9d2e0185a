"""ElevenLabs speech synthesis via the REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from personabrief.errors import SpeechValidationError, UpstreamAuthError
from personabrief.providers.base import (
    DEFAULT_TIMEOUT_SECONDS,
    SpeechProvider,
    call_with_timeout,
    translate_httpx_error,
)
from personabrief.schemas import AudioResult, estimate_duration_seconds

logger = logging.getLogger(__name__)

SERVICE = "ElevenLabs"
ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"

# Voice settings tuned for a calm briefing voice
DEFAULT_VOICE_SETTINGS: Dict[str, Any] = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}


class ElevenLabsProvider(SpeechProvider):
    """Text-to-speech through ElevenLabs, returning MP3 bytes."""

    def __init__(
        self,
        api_key: Optional[str],
        voice_id: str = "EXAVITQu4vr4xnSDxMaL",
        model_id: str = "eleven_turbo_v2",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        base_url: str = ELEVENLABS_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

        if not api_key:
            logger.warning("ELEVENLABS_API_KEY not configured")
        logger.info("Using ElevenLabs voice %s", voice_id)

    @property
    def name(self) -> str:
        return "elevenlabs"

    async def synthesize(self, script: str) -> AudioResult:
        """Synthesize speech for the script."""
        if not script or not script.strip():
            raise SpeechValidationError("Script cannot be empty")
        if not self.api_key:
            raise UpstreamAuthError(SERVICE)

        url = f"{self.base_url}/text-to-speech/{self.voice_id}"
        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }
        payload = {
            "text": script,
            "model_id": self.model_id,
            "voice_settings": DEFAULT_VOICE_SETTINGS,
        }

        logger.debug(
            "Synthesizing speech",
            extra={"char_count": len(script), "word_count": len(script.split())},
        )
        audio = await call_with_timeout(
            self._post(url, headers, payload),
            self.timeout_seconds,
            SERVICE,
        )

        result = AudioResult(audio=audio, duration_seconds=estimate_duration_seconds(script))
        logger.info(
            "Speech synthesized",
            extra={"audio_bytes": len(audio), "duration_seconds": result.duration_seconds},
        )
        return result

    async def _post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> bytes:
        try:
            response = await self._client.post(url, headers=headers, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise translate_httpx_error(SERVICE, e) from e
        return response.content

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "ElevenLabsProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
