"""Text generation and speech synthesis providers."""

from personabrief.providers.base import SpeechProvider, TextProvider
from personabrief.providers.elevenlabs import ElevenLabsProvider
from personabrief.providers.local import LocalProvider
from personabrief.providers.openai import OpenAIProvider

__all__ = [
    "TextProvider",
    "SpeechProvider",
    "OpenAIProvider",
    "LocalProvider",
    "ElevenLabsProvider",
]
