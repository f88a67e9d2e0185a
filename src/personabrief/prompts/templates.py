"""Prompt templates for article analysis, persona generation and audio scripts."""

from __future__ import annotations

from typing import Optional

from personabrief.schemas import AnalysisRecord, PersonaRecord

# Target window for the spoken briefing (45-60 seconds at a normal pace)
SCRIPT_TARGET_MIN_WORDS = 110
SCRIPT_TARGET_MAX_WORDS = 130
SCRIPT_TARGET_MAX_CHARS = 700

# Guardrails included in the inference prompts
GUARDRAILS = """
IMPORTANT RULES:
- Base your analysis ONLY on what is evident in the material
- Be specific and actionable
- Do not make psychological inferences or sensitive personal assessments
- For verbosity, use only: "low", "medium", or "high"
"""

JSON_ONLY = "Return ONLY valid JSON in this exact format (no markdown, no code blocks, just raw JSON):"

ANALYSIS_SCHEMA_HINT = """{
  "professionalContext": {
    "role": "string",
    "industry": "string",
    "seniority": "string"
  },
  "communicationStyle": {
    "tone": "string",
    "verbosity": "low" | "medium" | "high"
  },
  "inferredDesignPreferences": {
    "visualStyle": "string",
    "uxPriority": "string"
  },
  "inferredContentPreferences": {
    "respondsTo": ["string", "string", "string"],
    "avoids": ["string", "string"]
  }
}"""

PERSONA_SCHEMA_HINT = """{
  "personaName": "string - descriptive persona name",
  "summary": "string - 2-3 sentence summary of this persona",
  "professionalContext": {
    "role": "string",
    "industry": "string",
    "seniority": "string"
  },
  "communicationStyle": {
    "tone": "string",
    "verbosity": "low" | "medium" | "high"
  },
  "designBiases": {
    "visualStyle": "string",
    "uxPriority": "string"
  },
  "contentBiases": {
    "respondsTo": ["array", "of", "topics"],
    "avoids": ["array", "of", "topics"]
  },
  "briefConflicts": ["array", "of", "conflicts", "between", "preferences", "and", "brief"],
  "designGuidance": {
    "do": ["specific", "actionable", "recommendations"],
    "avoid": ["specific", "things", "to", "avoid"]
  }
}"""


def build_analysis_prompt(article_text: str) -> str:
    """
    Build the article analysis prompt.

    The article text is only sent to the model in this step; later steps
    work from the resulting analysis record.
    """
    prompt = f"""Analyze this article/writeup and extract professional insights about the author.

ARTICLE TEXT:
{article_text}

Based on the writing style, content, topics, and tone, infer the following about the author:

1. Professional role: what position does this person likely hold? (e.g. "Senior Product Designer", "Software Engineer")
2. Industry: what industry do they work in? (e.g. "Technology", "Healthcare", "Finance")
3. Seniority: choose from "Junior", "Mid-level", "Senior", "Executive", "Expert"
4. Communication style:
   - Tone: how do they communicate? (e.g. "Technical and precise", "Casual and conversational")
   - Verbosity: "low" (concise), "medium" (balanced) or "high" (detailed)
5. Design and content preferences, inferred from the writing:
   - Visual style they might prefer (e.g. "Clean and minimal", "Bold and colorful")
   - UX aspects they might value (e.g. "Simplicity and clarity", "Feature-rich functionality")
   - Content that would resonate with them (e.g. "Data-driven insights", "Storytelling")
   - Content they would likely avoid (e.g. "Overly technical jargon", "Superficial content")

{GUARDRAILS}

{JSON_ONLY}
{ANALYSIS_SCHEMA_HINT}"""

    return prompt


def build_persona_prompt(analysis: AnalysisRecord, design_brief: str) -> str:
    """Build the persona generation prompt from an analysis and a design brief."""
    prompt = f"""Given this profile analysis and design brief, generate a single actionable persona for designers.

PROFILE ANALYSIS:
{analysis.to_prompt_context()}

DESIGN BRIEF:
{design_brief}

Generate a persona that:
1. Aligns the person's preferences with the design brief
2. Explicitly surfaces any conflicts between preferences and brief
3. Provides specific, actionable design guidance (do/avoid lists)
4. Focuses on helping designers make immediate decisions

PERSONA RULES:
- Create a descriptive persona name (e.g. "The Pragmatic Enterprise Leader")
- Write a concise summary (2-3 sentences) that captures the essence of this persona
- In briefConflicts, list any tensions between the person's preferences and the brief
- In designGuidance.do, provide 4-6 specific actionable recommendations
- In designGuidance.avoid, provide 4-6 specific things to avoid
{GUARDRAILS}

{JSON_ONLY}
{PERSONA_SCHEMA_HINT}"""

    return prompt


def build_script_prompt(persona: PersonaRecord, previous_word_count: Optional[int] = None) -> str:
    """
    Build the spoken briefing prompt.

    When regenerating, the word count of the rejected draft is fed back so
    the model can correct its length.
    """
    word_count_feedback = ""
    if previous_word_count is not None:
        word_count_feedback = (
            f"\nIMPORTANT: Your previous attempt had {previous_word_count} words. "
            f"Please adjust to be between {SCRIPT_TARGET_MIN_WORDS}-{SCRIPT_TARGET_MAX_WORDS} words exactly."
        )

    prompt = f"""Convert this persona into a 45-60 second spoken briefing for a designer.

PERSONA:
{persona.to_prompt_context()}

CRITICAL REQUIREMENTS:
- MAXIMUM {SCRIPT_TARGET_MAX_WORDS} words (strictly enforce this limit!)
- MAXIMUM {SCRIPT_TARGET_MAX_CHARS} characters total
- Write in second person (address the designer as "you")
- Use plain language without jargon
- Be action-oriented: focus on what the designer should do
- Mention any conflicts between the person's preferences and the brief
- Keep it conversational and natural for speech
- Target length: {SCRIPT_TARGET_MIN_WORDS}-{SCRIPT_TARGET_MAX_WORDS} words
- Start with who this persona is, then move to actionable guidance{word_count_feedback}

Return ONLY the script text with no formatting, markdown, or code blocks. Just the raw script that will be spoken.

REMEMBER: Keep it under {SCRIPT_TARGET_MAX_WORDS} words and {SCRIPT_TARGET_MAX_CHARS} characters!"""

    return prompt
