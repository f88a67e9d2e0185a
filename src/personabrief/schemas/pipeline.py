"""Pipeline stage and result schema definitions."""

from __future__ import annotations

import base64
import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from personabrief.schemas.persona import PersonaRecord

WORDS_PER_MINUTE = 150
AUDIO_MIME_TYPE = "audio/mpeg"


class PipelineStage(str, Enum):
    ANALYZING = "analyzing"
    PERSONA_GENERATING = "persona_generating"
    SCRIPT_GENERATING = "script_generating"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    FAILED = "failed"


def estimate_duration_seconds(script: str) -> int:
    """Estimate spoken duration at 150 words per minute, rounded up."""
    word_count = len(script.split())
    return math.ceil(word_count / WORDS_PER_MINUTE * 60)


class AudioResult(BaseModel):
    """Synthesized speech plus its estimated duration."""

    model_config = ConfigDict(frozen=True)

    audio: bytes
    duration_seconds: int = Field(ge=0)

    def data_uri(self) -> str:
        """Render the audio as a self-contained data URI."""
        payload = base64.b64encode(self.audio).decode("ascii")
        return f"data:{AUDIO_MIME_TYPE};base64,{payload}"


class PipelineResult(BaseModel):
    """
    Final output of a pipeline run.

    An empty audio_url means synthesis failed and was skipped; persona and
    script are still valid.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    persona: PersonaRecord
    audio_url: str = ""
    audio_script: str
    processing_time_ms: float = Field(alias="processingTime", ge=0.0)

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_url)
