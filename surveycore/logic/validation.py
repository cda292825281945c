"""Type-aware validation of a question/answer pair.

Rules run in a fixed order and stop at the first failure:
required, length, numeric, format/rating range, file constraints. The chain
for a given question comes from its kind's registry entry, with `numeric_only`
adding the numeric rule to any text kind. Results are values; nothing here
raises for a bad answer.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Callable, Dict, Optional
from urllib.parse import urlparse
import logging
import re

from surveycore.config import CoreConfig
from surveycore.errors import ErrorKind
from surveycore.logic.answer_canonical import parse_number
from surveycore.logic.type_registry import DEFAULT_REGISTRY, TypeRegistry
from surveycore.models.answer import Answer
from surveycore.models.question import Question, RequiredLevel
from surveycore.models.question_kind import (
    QuestionKind,
    RULE_FILE,
    RULE_FORMAT,
    RULE_LENGTH,
    RULE_NUMERIC,
    RULE_RATING_RANGE,
    RULE_REQUIRED,
)
from surveycore.models.results import ValidationResult


logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+?[0-9 ().\-]+$")

_RULE_ORDER = (RULE_REQUIRED, RULE_LENGTH, RULE_NUMERIC, RULE_FORMAT, RULE_RATING_RANGE, RULE_FILE)

_LONG_KINDS = {QuestionKind.LONG_TEXT}


def _is_email(s: str) -> bool:
    return bool(_EMAIL_RE.match(s))


def _is_phone(s: str) -> bool:
    digits = sum(ch.isdigit() for ch in s)
    return bool(_PHONE_RE.match(s)) and 6 <= digits <= 15


def _is_url(s: str) -> bool:
    parsed = urlparse(s)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _parses(fn: Callable[[str], object]) -> Callable[[str], bool]:
    def check(s: str) -> bool:
        try:
            fn(s)
        except ValueError:
            return False
        return True

    return check


FORMAT_CHECKS: Dict[QuestionKind, Callable[[str], bool]] = {
    QuestionKind.EMAIL: _is_email,
    QuestionKind.PHONE: _is_phone,
    QuestionKind.URL: _is_url,
    QuestionKind.DATE: _parses(date.fromisoformat),
    QuestionKind.TIME: _parses(time.fromisoformat),
    QuestionKind.DATE_TIME: _parses(datetime.fromisoformat),
}


def file_extension(filename: str) -> str:
    """Lower-cased extension after the last dot, or "" when there is none."""
    name = str(filename or "").strip()
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


class Validator:
    def __init__(self, config: Optional[CoreConfig] = None, registry: Optional[TypeRegistry] = None) -> None:
        self._config = config or CoreConfig()
        self._registry = registry or DEFAULT_REGISTRY

    def is_numeric_question(self, question: Question) -> bool:
        return question.kind is QuestionKind.NUMBER or bool(question.numeric_only)

    def rules_for(self, question: Question) -> tuple[str, ...]:
        chain = set(self._registry.spec(question.kind).validators)
        if question.numeric_only and self._registry.spec(question.kind).is_text:
            chain.add(RULE_NUMERIC)
        return tuple(rule for rule in _RULE_ORDER if rule in chain)

    def rating_scale(self, question: Question) -> int:
        return int(question.max_length or self._config.validation.default_rating_scale)

    def check(self, question: Question, answer: Optional[Answer]) -> ValidationResult:
        """Validate the field the question's kind declares; the other field is ignored."""
        spec = self._registry.spec(question.kind)
        view = answer.field_view(spec) if answer is not None else None
        if view is None or view.is_empty():
            return self._check_missing(question)

        text = view.text or ""
        for rule in self.rules_for(question):
            reason: Optional[ErrorKind] = None
            if rule == RULE_LENGTH:
                reason = self._check_length(question, text)
            elif rule == RULE_NUMERIC:
                reason = self._check_numeric(question, text)
            elif rule == RULE_FORMAT:
                reason = self._check_format(question, text)
            elif rule == RULE_RATING_RANGE:
                reason = self._check_rating(question, view)
            elif rule == RULE_FILE:
                reason = self._check_file(question, view)
            if reason is not None:
                logger.debug("validation_failed question_id=%s rule=%s reason=%s", question.id, rule, reason.value)
                return ValidationResult(ok=False, reason=reason)
        return ValidationResult(ok=True)

    # -- individual rules ------------------------------------------------

    def _check_missing(self, question: Question) -> ValidationResult:
        if question.required is RequiredLevel.REQUIRED:
            return ValidationResult(ok=False, reason=ErrorKind.MISSING_REQUIRED)
        if question.required is RequiredLevel.SOFT:
            return ValidationResult(ok=True, warning=ErrorKind.MISSING_REQUIRED)
        return ValidationResult(ok=True)

    def _max_length(self, question: Question) -> Optional[int]:
        if question.max_length is not None:
            return int(question.max_length)
        cfg = self._config.validation
        if question.kind in _LONG_KINDS:
            return cfg.default_long_text_max_length
        return cfg.default_short_text_max_length

    def _check_length(self, question: Question, text: str) -> Optional[ErrorKind]:
        # On numeric questions max_length is a value bound, checked by the numeric rule
        if self.is_numeric_question(question):
            return None
        limit = self._max_length(question)
        if limit is not None and len(text) > limit:
            return ErrorKind.TOO_LONG
        return None

    def _check_numeric(self, question: Question, text: str) -> Optional[ErrorKind]:
        number = parse_number(text)
        if number is None:
            return ErrorKind.NOT_NUMERIC
        cfg = self._config.validation
        if cfg.enforce_numeric_bound and question.max_length is not None:
            bound = float(question.max_length)
            over = number > bound if cfg.numeric_bound_inclusive else number >= bound
            if over:
                return ErrorKind.OUT_OF_RANGE
        return None

    def _check_format(self, question: Question, text: str) -> Optional[ErrorKind]:
        check = FORMAT_CHECKS.get(question.kind)
        if check is None or check(text.strip()):
            return None
        return ErrorKind.INVALID_FORMAT

    def _check_rating(self, question: Question, answer: Answer) -> Optional[ErrorKind]:
        if question.options:
            # Option-backed ratings must name one of the options
            if answer.selection is not None and question.option_by_id(str(answer.selection)) is None:
                return ErrorKind.OUT_OF_RANGE
            return None
        raw = answer.selection if answer.selection is not None else answer.text
        number = parse_number(raw if not isinstance(raw, list) else None)
        if number is None or float(int(number)) != number:
            return ErrorKind.OUT_OF_RANGE
        if not 1 <= int(number) <= self.rating_scale(question):
            return ErrorKind.OUT_OF_RANGE
        return None

    def _check_file(self, question: Question, answer: Answer) -> Optional[ErrorKind]:
        if question.allowed_file_types:
            if file_extension(answer.text or "") not in question.allowed_file_types:
                return ErrorKind.FILE_TYPE_REJECTED
        if question.max_file_size_kb is not None and answer.file_size_kb is not None:
            if answer.file_size_kb > float(question.max_file_size_kb):
                return ErrorKind.FILE_TOO_LARGE
        return None


__all__ = ["Validator", "FORMAT_CHECKS", "file_extension"]
