"""Submission gating verdict computation.

Computes a verdict with the shape `{ ok, blocking_items, warnings }` by
validating every presented question. Hidden questions never block, and
soft-required findings are reported as warnings only.
"""

from __future__ import annotations

from typing import Iterable, List
import logging

from surveycore.logic.answer_store import AnswerStore
from surveycore.logic.validation import Validator
from surveycore.models.question import Question
from surveycore.models.results import GatingItem, GatingVerdict


logger = logging.getLogger(__name__)


def evaluate_gating(
    presented: Iterable[Question],
    store: AnswerStore,
    validator: Validator,
) -> GatingVerdict:
    """Validate each presented question and collect blocking failures and warnings."""
    questions = list(presented)
    logger.info("gating_check_start presented=%s", len(questions))
    blocking: List[GatingItem] = []
    warnings: List[GatingItem] = []
    for question in questions:
        result = validator.check(question, store.get(question.id))
        if not result.ok and result.reason is not None:
            blocking.append(GatingItem(question_id=question.id, reason=result.reason))
        elif result.warning is not None:
            warnings.append(GatingItem(question_id=question.id, reason=result.warning))
    ok = len(blocking) == 0
    logger.info(
        "gating_verdict ok=%s blocking=%s warnings=%s",
        ok,
        [item.question_id for item in blocking],
        [item.question_id for item in warnings],
    )
    return GatingVerdict(ok=ok, blocking_items=blocking, warnings=warnings)


__all__ = ["evaluate_gating"]
