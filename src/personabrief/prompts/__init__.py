"""Prompt templates for PersonaBrief."""

from personabrief.prompts.templates import (
    SCRIPT_TARGET_MAX_CHARS,
    SCRIPT_TARGET_MAX_WORDS,
    SCRIPT_TARGET_MIN_WORDS,
    build_analysis_prompt,
    build_persona_prompt,
    build_script_prompt,
)

__all__ = [
    "build_analysis_prompt",
    "build_persona_prompt",
    "build_script_prompt",
    "SCRIPT_TARGET_MIN_WORDS",
    "SCRIPT_TARGET_MAX_WORDS",
    "SCRIPT_TARGET_MAX_CHARS",
]
