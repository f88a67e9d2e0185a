"""Factory for creating text and speech providers based on configuration."""

from personabrief.config import Config
from personabrief.providers.base import SpeechProvider, TextProvider
from personabrief.providers.elevenlabs import ElevenLabsProvider
from personabrief.providers.local import LocalProvider
from personabrief.providers.openai import OpenAIProvider


def get_text_provider(config: Config) -> TextProvider:
    """
    Create a text generation provider based on configuration.

    Args:
        config: Application configuration

    Returns:
        Configured text provider instance
    """
    timeout = float(config.request_timeout_seconds)

    if config.llm_provider == "local":
        return LocalProvider(
            base_url=config.local_llm_base_url,
            default_model=config.local_llm_model,
            timeout_seconds=timeout,
        )

    return OpenAIProvider(
        api_key=config.openai_api_key,
        default_model=config.llm_model,
        timeout_seconds=timeout,
    )


def get_speech_provider(config: Config) -> SpeechProvider:
    """Create the speech synthesis provider."""
    return ElevenLabsProvider(
        api_key=config.elevenlabs_api_key,
        voice_id=config.elevenlabs_voice_id,
        model_id=config.elevenlabs_model_id,
        timeout_seconds=float(config.request_timeout_seconds),
    )
