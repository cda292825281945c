"""Error kinds and exceptions produced by the core.

Validator outcomes are plain values (`ErrorKind`) surfaced to the respondent.
Exceptions are reserved for survey-authoring defects and for callers naming a
question that does not exist.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MISSING_REQUIRED = "missing_required"
    TOO_LONG = "too_long"
    NOT_NUMERIC = "not_numeric"
    OUT_OF_RANGE = "out_of_range"
    INVALID_FORMAT = "invalid_format"
    FILE_TYPE_REJECTED = "file_type_rejected"
    FILE_TOO_LARGE = "file_too_large"


class SurveyCoreError(Exception):
    pass


class ConfigurationError(SurveyCoreError):
    """A condition references a missing or later question, or forms a cycle.

    Raised internally at registration and recorded by the evaluator; never
    propagated out of condition evaluation.
    """

    def __init__(self, question_id: str, code: str, detail: str = "") -> None:
        self.question_id = question_id
        self.code = code
        self.detail = detail
        super().__init__(f"{code}: question={question_id} {detail}".rstrip())


class SurveyDefinitionError(SurveyCoreError, ValueError):
    pass


class AnswerShapeError(SurveyCoreError, ValueError):
    """An answer operation does not fit the question kind (text on a choice question)."""

    def __init__(self, question_id: str, kind: str, operation: str) -> None:
        self.question_id = question_id
        self.kind = kind
        self.operation = operation
        super().__init__(f"type_mismatch: {operation} not allowed for kind={kind} question={question_id}")


class UnknownQuestionError(SurveyCoreError, KeyError):
    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__(question_id)

    def __str__(self) -> str:
        return f"unknown question_id={self.question_id}"


# Codes recorded on ConfigurationError.code
UNKNOWN_SOURCE = "unknown_source_question"
FORWARD_REFERENCE = "forward_reference"
CYCLE = "condition_cycle"

__all__ = [
    "ErrorKind",
    "SurveyCoreError",
    "ConfigurationError",
    "SurveyDefinitionError",
    "UnknownQuestionError",
    "AnswerShapeError",
    "UNKNOWN_SOURCE",
    "FORWARD_REFERENCE",
    "CYCLE",
]
