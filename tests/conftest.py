"""Shared fixtures and fakes for PersonaBrief tests."""

import json
from typing import Any, Dict, List, Optional, Sequence, Union

import pytest

from personabrief.events import EventType, PipelineEvent
from personabrief.providers.base import SpeechProvider, TextProvider
from personabrief.schemas import AudioResult, estimate_duration_seconds

Response = Union[str, BaseException]


ANALYSIS: Dict[str, Any] = {
    "professionalContext": {
        "role": "Staff Product Designer",
        "industry": "Fintech",
        "seniority": "Senior",
    },
    "communicationStyle": {"tone": "Direct and pragmatic", "verbosity": "low"},
    "inferredDesignPreferences": {
        "visualStyle": "Clean and minimal",
        "uxPriority": "Speed and clarity",
    },
    "inferredContentPreferences": {
        "respondsTo": ["Data-driven insights", "Case studies"],
        "avoids": ["Buzzwords"],
    },
}

PERSONA: Dict[str, Any] = {
    "personaName": "The Pragmatic Fintech Lead",
    "summary": "A senior designer who values clarity over flourish. Wants evidence before change.",
    "professionalContext": {
        "role": "Staff Product Designer",
        "industry": "Fintech",
        "seniority": "Senior",
    },
    "communicationStyle": {"tone": "Direct and pragmatic", "verbosity": "low"},
    "designBiases": {"visualStyle": "Clean and minimal", "uxPriority": "Speed and clarity"},
    "contentBiases": {"respondsTo": ["Metrics"], "avoids": ["Hype"]},
    "briefConflicts": ["Brief asks for a playful tone; persona prefers restraint"],
    "designGuidance": {
        "do": ["Lead with numbers", "Keep layouts sparse"],
        "avoid": ["Decorative illustration", "Jargon"],
    },
}


def words(n: int, word: str = "word") -> str:
    """A script of exactly n whitespace-delimited words."""
    return " ".join([word] * n)


def analysis_json(**overrides: Any) -> str:
    return json.dumps({**ANALYSIS, **overrides})


def persona_json(**overrides: Any) -> str:
    return json.dumps({**PERSONA, **overrides})


class FakeTextProvider(TextProvider):
    """Replays scripted responses; exceptions in the script are raised."""

    def __init__(self, responses: Sequence[Response]):
        self.responses: List[Response] = list(responses)
        self.prompts: List[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("unexpected text generation call")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


class RoutedTextProvider(TextProvider):
    """Answers by prompt kind, so concurrent runs can share one provider."""

    def __init__(self, script: str):
        self.script = script
        self.calls = 0

    @property
    def name(self) -> str:
        return "routed"

    async def generate_text(self, prompt: str, model=None, temperature=0.7, max_tokens=2048, json_mode=False) -> str:
        self.calls += 1
        if prompt.startswith("Analyze this article"):
            return analysis_json()
        if "single actionable persona" in prompt:
            return "```json\n" + persona_json() + "\n```"
        return self.script


class FakeSpeechProvider(SpeechProvider):
    """Returns fixed audio, or raises the configured error on every call."""

    def __init__(self, audio: bytes = b"ID3fake-mp3", error: Optional[BaseException] = None):
        self.audio = audio
        self.error = error
        self.scripts: List[str] = []

    @property
    def name(self) -> str:
        return "fake-speech"

    async def synthesize(self, script: str) -> AudioResult:
        self.scripts.append(script)
        if self.error is not None:
            raise self.error
        return AudioResult(audio=self.audio, duration_seconds=estimate_duration_seconds(script))


class RecordingObserver:
    def __init__(self):
        self.events: List[PipelineEvent] = []

    def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def types(self) -> List[EventType]:
        return [event.event_type for event in self.events]

    def of_type(self, event_type: EventType) -> List[PipelineEvent]:
        return [event for event in self.events if event.event_type is event_type]


class InstantSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class StepClock:
    """Monotonic fake clock advancing a fixed step per reading."""

    def __init__(self, step: float = 0.25):
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def instant_sleep() -> InstantSleep:
    return InstantSleep()
