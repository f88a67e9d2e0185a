"""Pydantic schemas for PersonaBrief."""

from personabrief.schemas.persona import (
    AnalysisRecord,
    CommunicationStyle,
    ContentPreferences,
    DesignGuidance,
    DesignPreferences,
    InferredCommunicationStyle,
    PersonaRecord,
    ProfessionalContext,
    Verbosity,
)
from personabrief.schemas.pipeline import (
    AudioResult,
    PipelineResult,
    PipelineStage,
    estimate_duration_seconds,
)

__all__ = [
    "AnalysisRecord",
    "PersonaRecord",
    "ProfessionalContext",
    "CommunicationStyle",
    "InferredCommunicationStyle",
    "DesignPreferences",
    "ContentPreferences",
    "DesignGuidance",
    "Verbosity",
    "AudioResult",
    "PipelineResult",
    "PipelineStage",
    "estimate_duration_seconds",
]
