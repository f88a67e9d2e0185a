"""Persona service: turns an analysis plus a design brief into a persona."""

from __future__ import annotations

from personabrief.parsing import parse_persona
from personabrief.prompts import build_persona_prompt
from personabrief.providers.base import TextProvider
from personabrief.schemas import AnalysisRecord, PersonaRecord


class PersonaService:
    """Service for generating designer-facing personas."""

    def __init__(self, provider: TextProvider):
        self.provider = provider

    async def generate(self, analysis: AnalysisRecord, design_brief: str) -> PersonaRecord:
        """
        Generate a persona aligned with the design brief.

        Args:
            analysis: Validated analysis of the author's writing
            design_brief: Free-text brief the designer is working on

        Returns:
            Validated PersonaRecord
        """
        prompt = build_persona_prompt(analysis, design_brief)

        text = await self.provider.generate_text(
            prompt=prompt,
            temperature=0.4,
            json_mode=True,
        )

        return parse_persona(text)
