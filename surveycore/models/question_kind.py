"""Canonical question kinds and their answer shapes.

`QuestionKind` is the closed set every raw type label is normalized to. Each
kind is described by a `KindSpec` declaring which answer field it uses, the
shape of a selection, and the validator chain applied to its answers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class QuestionKind(str, Enum):
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    SINGLE_CHOICE = "single_choice"
    SINGLE_CHOICE_IMAGE = "single_choice_image"
    MULTI_CHOICE = "multi_choice"
    MULTI_CHOICE_IMAGE = "multi_choice_image"
    RATING = "rating"
    MATRIX = "matrix"
    NUMBER = "number"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    DATE = "date"
    TIME = "time"
    DATE_TIME = "date_time"
    FILE = "file"
    DEFAULT_SHORT_ANSWER = "default_short_answer"


class AnswerField(str, Enum):
    TEXT = "text"
    SELECTION = "selection"


class SelectionShape(str, Enum):
    SCALAR = "scalar"
    ARRAY = "array"


# Validator rule names, applied in this order when present in a chain
RULE_REQUIRED = "required"
RULE_LENGTH = "length"
RULE_NUMERIC = "numeric"
RULE_FORMAT = "format"
RULE_RATING_RANGE = "rating_range"
RULE_FILE = "file"


@dataclass(frozen=True)
class KindSpec:
    kind: QuestionKind
    answer_field: AnswerField
    selection_shape: SelectionShape | None = None
    requires_options: bool = False
    validators: Tuple[str, ...] = (RULE_REQUIRED,)

    @property
    def is_selection(self) -> bool:
        return self.answer_field is AnswerField.SELECTION

    @property
    def is_multi(self) -> bool:
        return self.selection_shape is SelectionShape.ARRAY

    @property
    def is_text(self) -> bool:
        return self.answer_field is AnswerField.TEXT


__all__ = [
    "QuestionKind",
    "AnswerField",
    "SelectionShape",
    "KindSpec",
    "RULE_REQUIRED",
    "RULE_LENGTH",
    "RULE_NUMERIC",
    "RULE_FORMAT",
    "RULE_RATING_RANGE",
    "RULE_FILE",
]
