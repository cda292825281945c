"""Condition operators evaluated against a source question's answer.

Each operator is a total predicate over (answer tokens, comparand). Operands
of the wrong shape, such as `includes` against a single selection or
`greater_than` against non-numeric text, evaluate to False rather than raise.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional
import logging

from surveycore.logic.answer_canonical import answer_tokens, canonicalize_value, parse_number
from surveycore.models.answer import Answer
from surveycore.models.question import ConditionOperator, Question
from surveycore.models.question_kind import KindSpec


logger = logging.getLogger(__name__)


Predicate = Callable[[Optional[Answer], Optional[Question], object], bool]


def _comparands(value: object) -> List[str]:
    """Canonical comparand tokens; lists/tuples/sets expand to each member."""
    if isinstance(value, (list, tuple, set, frozenset)):
        items: Iterable[object] = value
    else:
        items = [value]
    out: List[str] = []
    for item in items:
        tok = canonicalize_value(item)
        if tok is not None and tok != "":
            out.append(tok)
    return out


def _is_answered(answer: Optional[Answer]) -> bool:
    return answer is not None and not answer.is_empty()


def _equals(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    if answer is None or answer.is_empty():
        return False
    if isinstance(answer.selection, list) and isinstance(value, (list, tuple, set, frozenset)):
        # A multi selection equals a comparand list when the chosen sets match
        chosen = set(answer.selected_ids())
        wanted = set(_comparands(value))
        if question is not None:
            wanted = {_option_id_for(question, tok) for tok in wanted}
        return chosen == wanted
    # A single comparand matches when it is the selection or one of the chosen options
    tokens = answer_tokens(answer, question)
    return any(tok in tokens for tok in _comparands(value))


def _option_id_for(question: Question, token: str) -> str:
    for opt in question.options:
        if str(opt.id) == token or canonicalize_value(opt.text) == token:
            return str(opt.id)
    return token


def _not_equals(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    # An unanswered source is not "different from" anything yet
    if not _is_answered(answer):
        return False
    return not _equals(answer, question, value)


def _includes(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    if answer is None or not isinstance(answer.selection, list):
        return False
    tokens = answer_tokens(answer, question)
    wanted = _comparands(value)
    return bool(wanted) and all(tok in tokens for tok in wanted)


def _not_includes(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    if answer is None or not isinstance(answer.selection, list):
        return False
    tokens = answer_tokens(answer, question)
    wanted = _comparands(value)
    return bool(wanted) and not any(tok in tokens for tok in wanted)


def _is_empty(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    return not _is_answered(answer)


def _is_answered_op(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    return _is_answered(answer)


def _contains(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
    if answer is None or answer.text is None or value is None:
        return False
    needle = str(value).strip().lower()
    return bool(needle) and needle in answer.text.lower()


def _numeric_compare(op: Callable[[float, float], bool]) -> Predicate:
    def predicate(answer: Optional[Answer], question: Optional[Question], value: object) -> bool:
        if answer is None:
            return False
        raw = answer.text if answer.selection is None else answer.selection
        if isinstance(raw, list):
            return False
        left = parse_number(raw)
        right = parse_number(value)
        if left is None or right is None:
            return False
        return op(left, right)

    return predicate


OPERATORS: Dict[ConditionOperator, Predicate] = {
    ConditionOperator.EQUALS: _equals,
    ConditionOperator.NOT_EQUALS: _not_equals,
    ConditionOperator.INCLUDES: _includes,
    ConditionOperator.NOT_INCLUDES: _not_includes,
    ConditionOperator.IS_EMPTY: _is_empty,
    ConditionOperator.IS_ANSWERED: _is_answered_op,
    ConditionOperator.CONTAINS: _contains,
    ConditionOperator.GREATER_THAN: _numeric_compare(lambda a, b: a > b),
    ConditionOperator.LESS_THAN: _numeric_compare(lambda a, b: a < b),
}


def evaluate_operator(
    operator: ConditionOperator,
    answer: Optional[Answer],
    comparand: object,
    question: Optional[Question] = None,
    spec: Optional[KindSpec] = None,
) -> bool:
    """Apply an operator; any failure counts as "does not match".

    With `spec`, only the answer field the source kind declares is read.
    """
    predicate = OPERATORS.get(operator)
    if predicate is None:
        return False
    if answer is not None:
        answer = answer.field_view(spec)
    try:
        return bool(predicate(answer, question, comparand))
    except (TypeError, ValueError, AttributeError):
        logger.warning(
            "condition_operator_failed operator=%s question_id=%s comparand=%r",
            getattr(operator, "value", operator),
            getattr(question, "id", None),
            comparand,
            exc_info=True,
        )
        return False


__all__ = ["OPERATORS", "evaluate_operator"]
