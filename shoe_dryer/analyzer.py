"""
Core orchestration / pipeline.

Flow:
1. Validate the upload (and ambient readings when the profile needs them)
2. Build the instruction from the profile's prompt template
3. Wrap the image bytes as an inline-data part
4. Single Gemini call (no retries)
5. Extract the first text output, or explain why there is none
6. For structured profiles: strip code fences and validate the two-field JSON (fail closed)
7. Return the response payload
"""

import json
import math
import os
import re
import logging
from dataclasses import dataclass
from string import Template
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .errors import ContentBlocked, EmptyModelOutput, InvalidUpload, OutputParseError
from .llm_client import dump_response, first_text, generate_from_image, image_to_part
from .schemas import ShoeAnalysis

# Configure module logger
logger = logging.getLogger(__name__)

Number = Union[int, float]

HUMIDITY_THRESHOLD_PERCENT = 70

PROMPTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "prompts")

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


def _read_prompt(name: str) -> str:
    """Read a prompt text file."""
    with open(os.path.join(PROMPTS_DIR, name), "r", encoding="utf-8") as f:
        return f.read().strip()


@dataclass(frozen=True)
class Readings:
    temperature: Number
    humidity: Number


@dataclass(frozen=True)
class AnalysisProfile:
    """A prompt template paired with the response schema it expects back."""
    name: str
    prompt_file: str
    structured: bool = True
    requires_readings: bool = False

    def build_prompt(self, readings: Optional[Readings] = None) -> str:
        template = _read_prompt(self.prompt_file)
        if not self.requires_readings:
            return template
        if readings is None:
            raise ValueError(f"profile {self.name} needs temperature and humidity")
        return Template(template).substitute(
            temperature=readings.temperature,
            humidity=readings.humidity,
            humidity_threshold=HUMIDITY_THRESHOLD_PERCENT,
        )


SHOE_PROFILE = AnalysisProfile(name="shoe", prompt_file="shoe_static.txt")
SHOE_CONTEXT_PROFILE = AnalysisProfile(
    name="shoe_context",
    prompt_file="shoe_context.txt",
    requires_readings=True,
)
FREE_TEXT_PROFILE = AnalysisProfile(name="free_text", prompt_file="free_text.txt", structured=False)


def parse_number(raw: Any) -> Optional[Number]:
    """Parse a form value as a finite number, keeping integers as int."""
    if raw is None or not isinstance(raw, str):
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_readings(temperature: Any, humidity: Any) -> Readings:
    t = parse_number(temperature)
    h = parse_number(humidity)
    if t is None or h is None:
        raise InvalidUpload("Both 'temperature' and 'humidity' are required and must be valid numbers.")
    return Readings(temperature=t, humidity=h)


def strip_code_fence(text: str) -> str:
    """Trim whitespace and a surrounding ```json ... ``` fence, if present."""
    text = text.strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text


def parse_shoe_analysis(text: str) -> ShoeAnalysis:
    """
    Normalize Gemini's reply into a ShoeAnalysis.

    Only fence-stripping is attempted before parsing; anything that is not a JSON object
    with a non-empty shoe_type and a numeric recommended_time_minutes raises OutputParseError
    carrying the untouched text.
    """
    cleaned = strip_code_fence(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise OutputParseError(text, reason=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        raise OutputParseError(text, reason=f"expected a JSON object, got {type(data).__name__}")

    try:
        return ShoeAnalysis.model_validate(data)
    except ValidationError as e:
        raise OutputParseError(text, reason=f"schema mismatch: {e.error_count()} error(s)")


def _safety_ratings(feedback: Any) -> List[Dict[str, Any]]:
    ratings = getattr(feedback, "safety_ratings", None) or []
    out = []
    for rating in ratings:
        if hasattr(rating, "model_dump"):
            out.append(rating.model_dump(mode="json", exclude_none=True))
        else:
            out.append(dict(rating))
    return out


def _block_reason(response: Any) -> Optional[str]:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback else None
    if not reason:
        return None
    # BlockedReason is a str enum; keep the provider's literal value
    return str(getattr(reason, "value", reason))


def extract_text(response: Any) -> str:
    """Return the model's text output or raise the matching failure."""
    text = first_text(response)
    if text:
        return text

    reason = _block_reason(response)
    if reason:
        ratings = _safety_ratings(response.prompt_feedback)
        logger.warning("analyze.blocked block_reason=%s safety_ratings=%d", reason, len(ratings))
        raise ContentBlocked(reason, ratings)

    debug = dump_response(response)
    logger.error("analyze.empty_output response=%s", json.dumps(debug, ensure_ascii=False)[:1000])
    raise EmptyModelOutput(debug)


@dataclass
class Upload:
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


async def run_analysis(
    client: Any,
    profile: AnalysisProfile,
    upload: Upload,
    *,
    model_name: str,
    readings: Optional[Readings] = None,
) -> Dict[str, Any]:
    """
    Run one upload through the profile's prompt, Gemini, and normalization.

    Raises an AnalysisError subclass on every failure path.
    """
    if not upload.data:
        raise InvalidUpload("Uploaded file is empty.")

    prompt = profile.build_prompt(readings)
    image_part = image_to_part(upload.data, upload.content_type)

    response = await generate_from_image(client, prompt, image_part, model_name=model_name)
    text = extract_text(response)
    logger.debug("LLM raw response: %s", text)

    payload: Dict[str, Any] = {
        "filename": upload.filename,
        "filesize": upload.size,
    }

    if not profile.structured:
        payload["gemini_analysis"] = text
    else:
        try:
            analysis = parse_shoe_analysis(text)
        except OutputParseError as e:
            logger.error("analyze.parse_failed profile=%s reason=%s", profile.name, e.reason)
            logger.error("Raw response was: %s...", text[:1000])
            raise
        payload["shoe_type"] = analysis.shoe_type
        payload["recommended_time_minutes"] = analysis.recommended_time_minutes

    if readings is not None:
        payload["temperature"] = readings.temperature
        payload["humidity"] = readings.humidity

    payload["model_used"] = model_name
    return payload
