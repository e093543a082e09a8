"""
Minimal Gemini client wrapper for image + instruction requests.

Rationale:
- Use google-genai SDK (supported) for Gemini access.
- One client per process, built at startup and handed to the route.
- Keep interface tiny: generate_from_image(client, prompt, image_part) -> raw response.
- No retries / no fallback / no streaming.
"""

import logging
from typing import Optional

try:
    from google import genai
    from google.genai import types
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "Missing dependency for Gemini client. Install 'google-genai' and remove 'google-generativeai'. "
        "Original import error: " + str(e)
    )

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"


def create_client(api_key: str) -> "genai.Client":
    """Build the process-wide Gemini client."""
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY or LLM_API_KEY must be set in environment")
    return genai.Client(api_key=api_key)


def image_to_part(image_bytes: bytes, mime_type: Optional[str] = None) -> types.Part:
    """
    Wrap raw image bytes as an inline-data part.

    The SDK serializes inline data as base64 on the wire; a missing or blank
    content type falls back to image/jpeg.
    """
    mime_type = (mime_type or "").strip() or DEFAULT_MIME_TYPE
    return types.Part(inline_data=types.Blob(data=image_bytes, mime_type=mime_type))


async def generate_from_image(
    client: "genai.Client",
    prompt: str,
    image_part: types.Part,
    *,
    model_name: str,
) -> types.GenerateContentResponse:
    """
    Send one user message (instruction text + image) to Gemini.

    Returns the raw response; deciding what it means is the caller's job.
    """
    contents = [
        types.Content(role="user", parts=[types.Part(text=prompt), image_part]),
    ]
    logger.debug(
        "llm.request model=%s prompt_chars=%d mime_type=%s",
        model_name,
        len(prompt),
        image_part.inline_data.mime_type if image_part.inline_data else None,
    )
    return await client.aio.models.generate_content(model=model_name, contents=contents)


def first_text(response: types.GenerateContentResponse) -> Optional[str]:
    """Text of the first candidate's first non-thought text part, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) if content else None
    for part in parts or []:
        if getattr(part, "thought", None):
            continue
        text = getattr(part, "text", None)
        if text:
            return text
    return None


def dump_response(response: types.GenerateContentResponse) -> dict:
    """JSON-safe rendering of a provider response for diagnostics."""
    try:
        return response.model_dump(mode="json", exclude_none=True)
    except Exception:
        logger.debug("llm.dump_failed", exc_info=True)
        return {"repr": repr(response)}
