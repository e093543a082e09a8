"""
Pydantic request/response models.

Rationale:
- ShoeAnalysis is the exact shape the prompt demands from Gemini; validation is strict
  so a quoted number or a missing field fails instead of being coerced.
- Response models are flat and optional so one model covers every analysis profile.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr, field_validator

MAX_DRYING_MINUTES = 60


class ShoeAnalysis(BaseModel):
    shoe_type: StrictStr
    recommended_time_minutes: Union[StrictInt, StrictFloat]

    @field_validator("shoe_type")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("shoe_type must not be blank")
        return v

    @field_validator("recommended_time_minutes")
    @classmethod
    def _within_ceiling(cls, v: Union[int, float]) -> Union[int, float]:
        if not 0 <= v <= MAX_DRYING_MINUTES:
            raise ValueError(f"recommended_time_minutes must be between 0 and {MAX_DRYING_MINUTES}")
        return v


class AnalysisResponse(BaseModel):
    filename: Optional[str] = None
    filesize: int
    shoe_type: Optional[str] = None
    gemini_analysis: Optional[str] = None
    recommended_time_minutes: Optional[Union[int, float]] = None
    temperature: Optional[Union[int, float]] = None
    humidity: Optional[Union[int, float]] = None
    model_used: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    safety_ratings: Optional[List[Dict[str, Any]]] = None
    gemini_raw_output: Optional[str] = None
    full_response_debug: Optional[Dict[str, Any]] = None
