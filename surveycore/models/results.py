"""Result envelopes returned to UI callers."""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field

from surveycore.errors import ErrorKind
from surveycore.models.visibility import VisibilityDelta


class ValidationResult(BaseModel):
    ok: bool
    reason: Optional[ErrorKind] = None
    # Non-blocking finding, e.g. an empty soft-required answer
    warning: Optional[ErrorKind] = None


class GatingItem(BaseModel):
    question_id: str
    reason: ErrorKind


class GatingVerdict(BaseModel):
    ok: bool
    blocking_items: List[GatingItem] = Field(default_factory=list)
    warnings: List[GatingItem] = Field(default_factory=list)


class AnswerResult(BaseModel):
    question_id: str
    validation: ValidationResult
    visibility_delta: VisibilityDelta = Field(default_factory=VisibilityDelta)


__all__ = ["ValidationResult", "GatingItem", "GatingVerdict", "AnswerResult"]
