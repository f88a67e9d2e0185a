"""Analyzer service: infers an author's profile from their writing."""

from __future__ import annotations

import logging

from personabrief.parsing import parse_analysis
from personabrief.prompts import build_analysis_prompt
from personabrief.providers.base import TextProvider
from personabrief.schemas import AnalysisRecord

logger = logging.getLogger(__name__)


class AnalyzerService:
    """
    Service for analyzing article text.

    This is the ONLY place where the raw article is sent to the LLM.
    Everything downstream works from the validated AnalysisRecord.
    """

    def __init__(self, provider: TextProvider):
        self.provider = provider

    async def analyze(self, article_text: str) -> AnalysisRecord:
        """
        Analyze article text and infer professional context and preferences.

        Raises:
            UpstreamError: if the provider call fails
            StructuralError: if the response is not a valid analysis
        """
        prompt = build_analysis_prompt(article_text)

        text = await self.provider.generate_text(
            prompt=prompt,
            temperature=0.2,  # Low temperature for consistent extraction
            json_mode=True,
        )

        analysis = parse_analysis(text)
        logger.debug(
            "Article analysed",
            extra={"role": analysis.professional_context.role},
        )
        return analysis
