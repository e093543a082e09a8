"""Request-terminating failures, each carrying its HTTP status and JSON body."""

from typing import Any, Dict, List, Optional


class AnalysisError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        body.update(self.extra)
        return body


class InvalidUpload(AnalysisError):
    status_code = 400


class ContentBlocked(AnalysisError):
    status_code = 403

    def __init__(self, block_reason: str, safety_ratings: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            f"Content was blocked due to safety settings: {block_reason}",
            safety_ratings=safety_ratings or [],
        )
        self.block_reason = block_reason


class EmptyModelOutput(AnalysisError):
    def __init__(self, full_response: Dict[str, Any]):
        super().__init__(
            "Gemini did not return any text output or the response structure was unexpected.",
            full_response_debug=full_response,
        )


class OutputParseError(AnalysisError):
    def __init__(self, raw_text: str, reason: str = ""):
        super().__init__(
            "Analysis successful but failed to parse JSON output from Gemini. Check prompt compliance.",
            gemini_raw_output=raw_text,
        )
        self.raw_text = raw_text
        self.reason = reason
