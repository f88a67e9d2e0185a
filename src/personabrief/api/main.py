"""FastAPI application for the PersonaBrief HTTP API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from personabrief.config import get_config
from personabrief.errors import (
    ErrorCategory,
    PipelineError,
    UpstreamRateLimitError,
    classify_error,
    root_cause,
    user_message,
)
from personabrief.logging_setup import setup_logging
from personabrief.schemas import PipelineResult
from personabrief.services import PersonaPipeline

logger = logging.getLogger(__name__)

MIN_ARTICLE_CHARS = 500
MIN_ARTICLE_WORDS = 100
MIN_BRIEF_CHARS = 10

RATE_LIMIT_MARKERS = ("rate limit", "quota")


# Request models
class GeneratePersonaRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    article_text: str = Field(min_length=MIN_ARTICLE_CHARS)
    design_brief: str = Field(min_length=MIN_BRIEF_CHARS)

    @field_validator("article_text")
    @classmethod
    def _enough_words(cls, value: str) -> str:
        if len(value.split()) < MIN_ARTICLE_WORDS:
            raise ValueError(f"article text must contain at least {MIN_ARTICLE_WORDS} words")
        return value


_STATUS_BY_CATEGORY = {
    ErrorCategory.TRANSIENT: 503,
    ErrorCategory.STRUCTURAL: 502,
    ErrorCategory.VALIDATION: 422,
}


def status_for_error(error: BaseException) -> int:
    """HTTP status for a failed pipeline run."""
    category = classify_error(error)
    if category == ErrorCategory.PERMANENT_UPSTREAM:
        cause = root_cause(error)
        if isinstance(cause, UpstreamRateLimitError):
            return 429
        message = str(cause).lower()
        return 429 if any(marker in message for marker in RATE_LIMIT_MARKERS) else 502
    return _STATUS_BY_CATEGORY.get(category, 500)


# Application state
class AppState:
    def __init__(self, pipeline: Optional[PersonaPipeline] = None):
        self.config = get_config()
        self.pipeline = pipeline or PersonaPipeline.from_config(self.config)

    async def close(self) -> None:
        await self.pipeline.text_provider.aclose()
        await self.pipeline.speech_provider.aclose()


state: Optional[AppState] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    global state
    if state is None:
        config = get_config()
        setup_logging(config.log_level, use_json=config.log_json)
        state = AppState()
    yield
    if state:
        await state.close()
        state = None


app = FastAPI(
    title="PersonaBrief API",
    description="Designer personas and spoken briefings from a person's writing.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_state() -> AppState:
    """Get application state."""
    if state is None:
        raise HTTPException(status_code=500, detail="Application not initialized")
    return state


@app.post("/persona/generate", response_model=PipelineResult, response_model_by_alias=True)
async def generate_persona(request: GeneratePersonaRequest) -> PipelineResult:
    """Generate a persona and audio briefing from article text and a design brief."""
    s = get_state()

    try:
        return await s.pipeline.generate_persona(request.article_text, request.design_brief)
    except PipelineError as e:
        category = classify_error(e)
        logger.error(
            "Persona generation request failed",
            extra={"category": category, "failed_stage": e.stage, "elapsed_ms": e.elapsed_ms},
        )
        raise HTTPException(status_code=status_for_error(e), detail=user_message(category))


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
