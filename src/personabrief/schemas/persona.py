"""Analysis and persona schema definitions."""

from __future__ import annotations

from typing import Annotated, Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Verbosity = Literal["low", "medium", "high"]
VERBOSITY_LEVELS = ("low", "medium", "high")

NonEmptyStr = Annotated[str, Field(min_length=1)]


class Record(BaseModel):
    """Immutable record with camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ProfessionalContext(Record):
    role: NonEmptyStr
    industry: NonEmptyStr
    seniority: NonEmptyStr


class CommunicationStyle(Record):
    tone: NonEmptyStr
    verbosity: Verbosity

    @field_validator("verbosity", mode="before")
    @classmethod
    def _default_unknown_verbosity(cls, value: Any) -> Any:
        # Models drift off the enum ("moderate", "extreme"); fall back to the middle.
        # A blank value is left for the enum check to reject.
        if value and value not in VERBOSITY_LEVELS:
            return "medium"
        return value


class InferredCommunicationStyle(CommunicationStyle):
    """Communication style as read off an article; verbosity may be absent."""

    verbosity: Verbosity = "medium"

    @field_validator("verbosity", mode="before")
    @classmethod
    def _default_unknown_verbosity(cls, value: Any) -> Any:
        if value not in VERBOSITY_LEVELS:
            return "medium"
        return value


class DesignPreferences(Record):
    """Visual and UX leanings, inferred (analysis) or biased (persona)."""

    visual_style: NonEmptyStr
    ux_priority: NonEmptyStr


class ContentPreferences(Record):
    """Topics the person engages with and topics that put them off."""

    responds_to: List[str]
    avoids: List[str]


class DesignGuidance(Record):
    do: List[str] = Field(min_length=1)
    avoid: List[str] = Field(min_length=1)


class AnalysisRecord(Record):
    """
    What the analysis step infers about an author from their writing.

    Consumed only by persona generation.
    """

    professional_context: ProfessionalContext
    communication_style: InferredCommunicationStyle
    inferred_design_preferences: DesignPreferences
    inferred_content_preferences: ContentPreferences

    def to_prompt_context(self) -> str:
        """Convert the analysis to a string suitable for LLM prompts."""
        return self.model_dump_json(indent=2, by_alias=True)


class PersonaRecord(Record):
    """
    A single actionable persona for designers.

    Aligns the author's preferences with a design brief, surfaces the
    conflicts between the two and gives do/avoid guidance.
    """

    persona_name: NonEmptyStr
    summary: NonEmptyStr
    professional_context: ProfessionalContext
    communication_style: CommunicationStyle
    design_biases: DesignPreferences
    content_biases: ContentPreferences
    brief_conflicts: List[str]
    design_guidance: DesignGuidance

    def to_prompt_context(self) -> str:
        """Convert the persona to a string suitable for LLM prompts."""
        return self.model_dump_json(indent=2, by_alias=True)
