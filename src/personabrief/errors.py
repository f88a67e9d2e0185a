"""Error taxonomy for the persona pipeline.

Upstream failures are normalised into exceptions whose messages carry the
markers the transient-error classifier looks for, so retry decisions can be
made from the message alone regardless of which SDK raised the original.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class PersonaBriefError(Exception):
    """Base class for all PersonaBrief errors."""


# Upstream (network / remote service) failures


class UpstreamError(PersonaBriefError):
    """A call to a remote text or speech service failed."""

    def __init__(self, service: str, message: str):
        super().__init__(message)
        self.service = service


class UpstreamTimeoutError(UpstreamError):
    """The remote service did not answer within the call timeout."""

    def __init__(self, service: str, timeout_seconds: Optional[float] = None):
        detail = f" after {timeout_seconds:g}s" if timeout_seconds is not None else ""
        super().__init__(service, f"{service} API timeout{detail}. Please try again.")
        self.timeout_seconds = timeout_seconds


class UpstreamConnectionError(UpstreamError):
    """The remote service could not be reached."""

    def __init__(self, service: str, detail: str = ""):
        suffix = f": {detail}" if detail else ""
        super().__init__(service, f"{service} network connection failed{suffix}")


class UpstreamAuthError(UpstreamError):
    """Credentials were missing or rejected."""

    def __init__(self, service: str):
        super().__init__(
            service,
            f"{service} authentication failed. Please check API key configuration.",
        )


class UpstreamRateLimitError(UpstreamError):
    """The remote service refused the call because of rate limit or quota."""

    def __init__(self, service: str):
        super().__init__(service, f"{service} rate limit exceeded. Please try again later.")


class UpstreamUnavailableError(UpstreamError):
    """The remote service reported a server-side (5xx) failure."""

    def __init__(self, service: str, status_code: int):
        super().__init__(
            service,
            f"{service} temporarily unavailable (HTTP {status_code})",
        )
        self.status_code = status_code


class UpstreamRequestError(UpstreamError):
    """The remote service rejected the request itself (4xx other than auth/limits)."""

    def __init__(self, service: str, status_code: int, detail: str = ""):
        reason = "resource not found" if status_code == 404 else "invalid request"
        suffix = f": {detail}" if detail else ""
        super().__init__(service, f"{service} {reason} (HTTP {status_code}){suffix}")
        self.status_code = status_code


# Structural failures of model output


class StructuralError(PersonaBriefError):
    """The model answered, but not in the required shape."""


class ResponseParseError(StructuralError):
    """The model response is not a JSON object."""


class ResponseValidationError(StructuralError):
    """The model response is JSON but is missing or has malformed fields."""

    def __init__(self, record: str, problems: Sequence[str], fields: Sequence[str]):
        self.record = record
        self.problems: List[str] = list(problems)
        self.fields: List[str] = list(fields)
        super().__init__(
            f"Invalid {record} structure (validation failed): " + "; ".join(self.problems)
        )


class SpeechValidationError(PersonaBriefError):
    """Speech synthesis was asked to voice an empty script."""


# Control-flow wrappers


class OperationFailedError(PersonaBriefError):
    """An operation gave up, either on a permanent error or after exhausting retries."""

    def __init__(self, operation_name: str, attempts: int, cause: BaseException):
        super().__init__(f"{operation_name} failed after {attempts} attempt(s): {cause}")
        self.operation_name = operation_name
        self.attempts = attempts
        self.cause = cause


class PipelineError(PersonaBriefError):
    """One of the critical pipeline stages failed; no partial result exists."""

    def __init__(self, stage: str, elapsed_ms: float, cause: BaseException):
        super().__init__(f"Persona generation failed: {cause}")
        self.stage = stage
        self.elapsed_ms = elapsed_ms
        self.cause = cause


class ErrorCategory:
    """Stable, user-facing error categories."""

    TRANSIENT = "transient"
    PERMANENT_UPSTREAM = "permanent_upstream"
    STRUCTURAL = "structural"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


def root_cause(error: BaseException) -> BaseException:
    """Unwrap pipeline and retry wrappers down to the originating error."""
    while isinstance(error, (PipelineError, OperationFailedError)):
        error = error.cause
    return error


def classify_error(error: BaseException) -> str:
    """Map an error (possibly wrapped) to an ErrorCategory value."""
    # Imported lazily; retry depends on this module for OperationFailedError.
    from personabrief.retry import is_transient_error

    cause = root_cause(error)

    if isinstance(cause, (UpstreamAuthError, UpstreamRateLimitError, UpstreamRequestError)):
        return ErrorCategory.PERMANENT_UPSTREAM
    if isinstance(cause, StructuralError):
        return ErrorCategory.STRUCTURAL
    if isinstance(cause, SpeechValidationError):
        return ErrorCategory.VALIDATION
    if is_transient_error(cause):
        return ErrorCategory.TRANSIENT

    message = str(cause).lower()
    if any(marker in message for marker in ("rate limit", "quota", "authentication", "api key")):
        return ErrorCategory.PERMANENT_UPSTREAM

    return ErrorCategory.UNKNOWN


def user_message(category: str) -> str:
    """Get the message shown to end users for an error category."""
    messages = {
        ErrorCategory.TRANSIENT: "The generation service is not responding right now. Please try again.",
        ErrorCategory.PERMANENT_UPSTREAM: "The generation service rejected the request. Please try again later.",
        ErrorCategory.STRUCTURAL: "The generation service returned an unexpected response. Please try again.",
        ErrorCategory.VALIDATION: "The request could not be processed. Please check your input.",
    }
    return messages.get(category, "Persona generation failed. Please try again.")
