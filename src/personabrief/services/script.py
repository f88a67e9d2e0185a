"""Script service: spoken briefings held to a word and character budget.

The length policy is a small decision table kept apart from the network
call that feeds it:

1. more than MAX_SCRIPT_CHARS characters -> truncate, done
2. word count outside [MIN_SCRIPT_WORDS, MAX_SCRIPT_WORDS] -> regenerate once
3. otherwise -> accept

A regenerated draft goes through the same table, except that it is never
regenerated again: if it is still out of range the original draft wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from personabrief.events import EventType, PipelineObserver, Severity, emit_event
from personabrief.prompts import build_script_prompt
from personabrief.providers.base import TextProvider
from personabrief.schemas import PersonaRecord

logger = logging.getLogger(__name__)

MIN_SCRIPT_WORDS = 110
MAX_SCRIPT_WORDS = 150
MAX_SCRIPT_CHARS = 800
# A sentence boundary before this offset would cut too much; hard-truncate instead
MIN_SENTENCE_CUT = 600

_FENCE_RE = re.compile(r"```[a-z]*\n?")
_EDGE_QUOTE_RE = re.compile(r"^[\"']|[\"']$")
_WHITESPACE_RE = re.compile(r"\s+")


class ScriptVerdict(str, Enum):
    ACCEPTED = "accepted"
    TRUNCATED = "truncated"
    NEEDS_REGENERATION = "needs_regeneration"


@dataclass(frozen=True)
class ScriptAssessment:
    verdict: ScriptVerdict
    text: str
    word_count: int


def clean_script(text: str) -> str:
    """Strip fences, one pair of edge quotes and collapse whitespace."""
    clean = text.strip()
    if clean.startswith("```"):
        clean = _FENCE_RE.sub("", clean)
    clean = _EDGE_QUOTE_RE.sub("", clean)
    return _WHITESPACE_RE.sub(" ", clean).strip()


def count_words(text: str) -> int:
    return len(text.split())


def truncate_script(text: str) -> str:
    """
    Cut a script down to MAX_SCRIPT_CHARS.

    Ends on the last period inside the window when that period lies past
    MIN_SENTENCE_CUT, otherwise keeps the whole window.
    """
    truncated = text[:MAX_SCRIPT_CHARS].strip()
    last_period = truncated.rfind(".")
    if last_period > MIN_SENTENCE_CUT:
        return truncated[: last_period + 1]
    return truncated


def assess_script(text: str) -> ScriptAssessment:
    """Apply the length decision table to a cleaned script."""
    word_count = count_words(text)

    if len(text) > MAX_SCRIPT_CHARS:
        truncated = truncate_script(text)
        return ScriptAssessment(ScriptVerdict.TRUNCATED, truncated, count_words(truncated))

    if word_count < MIN_SCRIPT_WORDS or word_count > MAX_SCRIPT_WORDS:
        return ScriptAssessment(ScriptVerdict.NEEDS_REGENERATION, text, word_count)

    return ScriptAssessment(ScriptVerdict.ACCEPTED, text, word_count)


class ScriptService:
    """
    Service for generating the spoken briefing script.

    Makes at most two provider calls per script and always returns text of
    at most MAX_SCRIPT_CHARS characters.
    """

    def __init__(self, provider: TextProvider, observer: Optional[PipelineObserver] = None):
        self.provider = provider
        self.observer = observer

    async def generate(self, persona: PersonaRecord) -> str:
        """Generate a briefing script for the persona."""
        draft = clean_script(await self._request(persona))
        assessment = assess_script(draft)

        if assessment.verdict is ScriptVerdict.TRUNCATED:
            self._truncated(len(draft), assessment)
            return assessment.text

        if assessment.verdict is ScriptVerdict.ACCEPTED:
            return draft

        emit_event(
            self.observer,
            EventType.SCRIPT_REGENERATED,
            f"Generated script has {assessment.word_count} words, "
            f"expected {MIN_SCRIPT_WORDS}-{MAX_SCRIPT_WORDS}. Regenerating...",
            severity=Severity.WARN,
            word_count=assessment.word_count,
        )

        retry = clean_script(await self._request(persona, previous_word_count=assessment.word_count))
        retry_assessment = assess_script(retry)

        if retry_assessment.verdict is ScriptVerdict.TRUNCATED:
            self._truncated(len(retry), retry_assessment)
            return retry_assessment.text

        if retry_assessment.verdict is ScriptVerdict.ACCEPTED:
            return retry

        logger.debug(
            "Regenerated script still out of range, keeping original",
            extra={"word_count": retry_assessment.word_count},
        )
        return draft

    async def _request(self, persona: PersonaRecord, previous_word_count: Optional[int] = None) -> str:
        prompt = build_script_prompt(persona, previous_word_count=previous_word_count)
        return await self.provider.generate_text(prompt=prompt, temperature=0.7, max_tokens=512)

    def _truncated(self, original_chars: int, assessment: ScriptAssessment) -> None:
        emit_event(
            self.observer,
            EventType.SCRIPT_TRUNCATED,
            f"Script too long ({original_chars} chars). Truncated to {len(assessment.text)} characters",
            severity=Severity.WARN,
            char_count=original_chars,
            truncated_chars=len(assessment.text),
            word_count=assessment.word_count,
        )
