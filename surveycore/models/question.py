"""Question, option and condition models.

These are immutable inputs to a response session. The loader in
`surveycore.logic.survey_loader` builds them from author-facing dictionaries;
tests and embedding code may construct them directly.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from surveycore.models.question_kind import QuestionKind


class RequiredLevel(str, Enum):
    """Tri-state required flag ("Bật" / "Soft" / "Tắt" in the editor)."""

    REQUIRED = "required"
    SOFT = "soft"
    OFF = "off"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    INCLUDES = "includes"
    NOT_INCLUDES = "not_includes"
    IS_EMPTY = "is_empty"
    IS_ANSWERED = "is_answered"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    image: Optional[str] = None


class Condition(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_question_id: str
    operator: ConditionOperator = ConditionOperator.EQUALS
    comparand_value: Any = None
    target_scenario_id: str


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: QuestionKind
    label: str = ""
    help_text: Optional[str] = None
    image: Optional[str] = None
    options: List[Option] = Field(default_factory=list)
    required: RequiredLevel = RequiredLevel.SOFT
    max_length: Optional[int] = None
    numeric_only: bool = False
    allowed_file_types: Optional[List[str]] = None
    max_file_size_kb: Optional[float] = None
    conditions: List[Condition] = Field(default_factory=list)
    default_scenario_id: str = "default"
    raw_type: Optional[str] = None

    @field_validator("id")
    @classmethod
    def id_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("question id must be a non-empty string")
        return v

    @field_validator("allowed_file_types")
    @classmethod
    def normalize_extensions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        out = [str(ext).strip().lower().lstrip(".") for ext in v]
        return [ext for ext in out if ext] or None

    def option_by_id(self, option_id: str) -> Optional[Option]:
        for opt in self.options:
            if str(opt.id) == str(option_id):
                return opt
        return None

    @property
    def is_conditional(self) -> bool:
        return bool(self.conditions)


class Survey(BaseModel):
    """Ordered question list; declared order defines which references are back-references."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    title: str = ""
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="after")
    def ids_must_be_unique(self) -> "Survey":
        seen: set[str] = set()
        for q in self.questions:
            if q.id in seen:
                raise ValueError(f"duplicate question id {q.id!r}")
            seen.add(q.id)
        return self

    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]

    def get(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


__all__ = [
    "RequiredLevel",
    "ConditionOperator",
    "Option",
    "Condition",
    "Question",
    "Survey",
]
