"""Parsing and structural validation of model responses.

Models are asked for raw JSON but often wrap it in markdown fences. These
helpers strip the fences, decode the document and validate it against the
record schema, failing with an error that names every offending field.
Nothing here performs I/O or retries.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from personabrief.errors import ResponseParseError, ResponseValidationError
from personabrief.schemas import AnalysisRecord, PersonaRecord

RecordT = TypeVar("RecordT", bound=BaseModel)

_FENCE_RE = re.compile(r"```[a-zA-Z]*\n?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) around a response."""
    clean = text.strip()
    if clean.startswith("```"):
        clean = _FENCE_RE.sub("", clean).strip()
    return clean


def parse_json_document(text: str) -> Dict[str, Any]:
    """Decode a (possibly fenced) JSON object from raw model text."""
    clean = strip_code_fences(text)
    if not clean:
        raise ResponseParseError("Failed to parse model response: empty response")

    try:
        document = json.loads(clean)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Failed to parse model response: {e}") from e

    if not isinstance(document, dict):
        raise ResponseParseError(
            f"Failed to parse model response: expected a JSON object, got {type(document).__name__}"
        )
    return document


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _describe(error: Dict[str, Any]) -> str:
    path = _field_path(error["loc"]) or "<root>"
    if error["type"] == "missing":
        return f"Missing required field: {path}"
    return f"{path}: {error['msg']}"


def validate_record(document: Dict[str, Any], model: Type[RecordT], record_name: str) -> RecordT:
    """Validate a decoded document against a record schema."""
    try:
        return model.model_validate(document)
    except ValidationError as e:
        errors = e.errors()
        fields: List[str] = []
        for error in errors:
            path = _field_path(error["loc"])
            if path not in fields:
                fields.append(path)
        raise ResponseValidationError(
            record_name,
            problems=[_describe(error) for error in errors],
            fields=fields,
        ) from e


def parse_analysis(text: str) -> AnalysisRecord:
    """Parse the analysis step's response."""
    return validate_record(parse_json_document(text), AnalysisRecord, "profile analysis")


def parse_persona(text: str) -> PersonaRecord:
    """Parse the persona step's response."""
    return validate_record(parse_json_document(text), PersonaRecord, "persona")
