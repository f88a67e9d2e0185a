"""Pipeline orchestrator: article text in, persona and spoken briefing out."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

from personabrief.config import Config
from personabrief.errors import PipelineError
from personabrief.events import (
    EventType,
    LoggingObserver,
    PipelineObserver,
    Severity,
    emit_event,
)
from personabrief.providers.base import SpeechProvider, TextProvider
from personabrief.providers.factory import get_speech_provider, get_text_provider
from personabrief.retry import DEFAULT_MAX_RETRIES, SleepFunc, retry_with_backoff
from personabrief.schemas import PipelineResult, PipelineStage
from personabrief.services.analyzer import AnalyzerService
from personabrief.services.persona import PersonaService
from personabrief.services.script import ScriptService, count_words

T = TypeVar("T")

TOTAL_STEPS = 4


class PersonaPipeline:
    """
    Runs analyze -> persona -> script -> synthesize, strictly in order.

    The first three stages are critical: if one fails after its retries the
    whole run fails with PipelineError and nothing is returned. Synthesis
    is not: its failure leaves an empty audio_url on an otherwise complete
    result.

    A pipeline holds no per-run state, so one instance can serve concurrent
    runs.
    """

    def __init__(
        self,
        text_provider: TextProvider,
        speech_provider: SpeechProvider,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        observer: Optional[PipelineObserver] = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.text_provider = text_provider
        self.speech_provider = speech_provider
        self.max_retries = max_retries
        self.observer: PipelineObserver = observer or LoggingObserver()
        self._sleep = sleep
        self._clock = clock

        self.analyzer = AnalyzerService(text_provider)
        self.persona_service = PersonaService(text_provider)
        self.script_service = ScriptService(text_provider, observer=self.observer)

    @classmethod
    def from_config(cls, config: Config, observer: Optional[PipelineObserver] = None) -> "PersonaPipeline":
        """Build a pipeline wired to the configured providers."""
        return cls(
            text_provider=get_text_provider(config),
            speech_provider=get_speech_provider(config),
            max_retries=config.max_retries,
            observer=observer,
        )

    async def generate_persona(self, article_text: str, design_brief: str) -> PipelineResult:
        """
        Generate a persona and spoken briefing from article text.

        Input bounds are the caller's responsibility and are not re-checked.

        Raises:
            PipelineError: if analysis, persona or script generation fails
        """
        started = self._clock()
        stage = PipelineStage.ANALYZING

        try:
            analysis = await self._run_stage(
                stage,
                "Article text analysis",
                lambda: self.analyzer.analyze(article_text),
            )

            stage = PipelineStage.PERSONA_GENERATING
            persona = await self._run_stage(
                stage,
                "Persona generation",
                lambda: self.persona_service.generate(analysis, design_brief),
            )

            stage = PipelineStage.SCRIPT_GENERATING
            script = await self._run_stage(
                stage,
                "Audio script generation",
                lambda: self.script_service.generate(persona),
            )
        except Exception as error:
            elapsed_ms = self._elapsed_ms(started)
            emit_event(
                self.observer,
                EventType.PIPELINE_FAILED,
                f"Pipeline failed after {elapsed_ms:.0f}ms: {error}",
                severity=Severity.ERROR,
                stage=PipelineStage.FAILED.value,
                failed_stage=stage.value,
                elapsed_ms=elapsed_ms,
            )
            raise PipelineError(stage.value, elapsed_ms, error) from error

        audio_url = await self._synthesize(script)

        elapsed_ms = self._elapsed_ms(started)
        emit_event(
            self.observer,
            EventType.PIPELINE_COMPLETED,
            f"Pipeline complete in {elapsed_ms:.0f}ms",
            stage=PipelineStage.COMPLETE.value,
            elapsed_ms=elapsed_ms,
            has_audio=bool(audio_url),
        )

        return PipelineResult(
            persona=persona,
            audio_url=audio_url,
            audio_script=script,
            processing_time_ms=elapsed_ms,
        )

    async def _synthesize(self, script: str) -> str:
        """Run the non-critical synthesis stage; any failure degrades to ""."""
        stage = PipelineStage.SYNTHESIZING
        try:
            audio = await self._run_stage(
                stage,
                "Audio synthesis",
                lambda: self.speech_provider.synthesize(script),
            )
        except Exception as error:
            emit_event(
                self.observer,
                EventType.DEGRADE_APPLIED,
                f"Audio synthesis failed: {error}. Continuing without audio",
                severity=Severity.WARN,
                stage=stage.value,
                error=str(error),
            )
            return ""

        return audio.data_uri()

    async def _run_stage(
        self,
        stage: PipelineStage,
        operation_name: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        step = _STEP_NUMBERS[stage]
        emit_event(
            self.observer,
            EventType.STAGE_ENTERED,
            f"Step {step}/{TOTAL_STEPS}: {operation_name}",
            stage=stage.value,
            step=step,
        )

        result = await retry_with_backoff(
            operation,
            operation_name,
            self.max_retries,
            sleep=self._sleep,
            observer=self.observer,
        )

        emit_event(
            self.observer,
            EventType.STAGE_EXITED,
            f"{operation_name} complete",
            stage=stage.value,
            step=step,
            **_stage_summary(result),
        )
        return result

    def _elapsed_ms(self, started: float) -> float:
        return (self._clock() - started) * 1000.0


_STEP_NUMBERS = {
    PipelineStage.ANALYZING: 1,
    PipelineStage.PERSONA_GENERATING: 2,
    PipelineStage.SCRIPT_GENERATING: 3,
    PipelineStage.SYNTHESIZING: 4,
}


def _stage_summary(result: object) -> dict:
    """Small, log-safe summary of a stage's output."""
    if isinstance(result, str):
        return {"word_count": count_words(result), "char_count": len(result)}
    persona_name = getattr(result, "persona_name", None)
    if persona_name:
        return {"persona_name": persona_name}
    audio = getattr(result, "audio", None)
    if isinstance(audio, bytes):
        return {"audio_bytes": len(audio)}
    return {}
