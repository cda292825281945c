"""Read-only "why is this shown" projection for the authoring UI.

Besides the resolved scenario, each condition is annotated with the source
question's 1-based position and the option text it compares against, as the
survey editor renders it ("Hiển thị khi Câu 1 chọn: Có"). Conditions whose
source question or option cannot be resolved are left out of the annotations.
"""

from __future__ import annotations

from typing import List, Optional

from surveycore.errors import UnknownQuestionError
from surveycore.logic.answer_canonical import canonicalize_value
from surveycore.logic.condition_evaluator import ConditionEvaluator
from surveycore.models.question import Condition, ConditionOperator, Option, Question
from surveycore.models.visibility import ConditionDescription, ConditionInfo


_OPTION_PHRASES = {
    ConditionOperator.EQUALS: "chọn",
    ConditionOperator.INCLUDES: "chọn",
    ConditionOperator.NOT_EQUALS: "không chọn",
    ConditionOperator.NOT_INCLUDES: "không chọn",
}


def _resolve_options(question: Question, comparand: object) -> List[Option]:
    values = comparand if isinstance(comparand, (list, tuple, set, frozenset)) else [comparand]
    found: List[Option] = []
    for value in values:
        token = canonicalize_value(value)
        if not token:
            continue
        for opt in question.options:
            if str(opt.id) == token or canonicalize_value(opt.text) == token:
                if opt not in found:
                    found.append(opt)
                break
    return found


class ConditionInfoProjector:
    def __init__(self, evaluator: ConditionEvaluator) -> None:
        self._evaluator = evaluator

    def describe(self, question_id: str) -> ConditionInfo:
        conditions = self._evaluator.conditions_of(question_id)
        state = self._evaluator.state(question_id)
        triggering: List[str] = []
        for cond in conditions:
            if cond.source_question_id not in triggering:
                triggering.append(cond.source_question_id)
        descriptions = []
        for index, cond in enumerate(conditions):
            described = self._describe_condition(index, cond)
            if described is not None:
                descriptions.append(described)
        error = self._evaluator.configuration_errors.get(question_id)
        return ConditionInfo(
            question_id=question_id,
            is_conditional=bool(conditions),
            triggering_question_ids=triggering,
            resolved_scenario_id=state.active_scenario_id,
            matched_condition_index=state.matched_condition_index,
            configuration_error=error.code if error is not None else None,
            descriptions=descriptions,
        )

    def _describe_condition(self, index: int, cond: Condition) -> Optional[ConditionDescription]:
        try:
            source = self._evaluator.question(cond.source_question_id)
        except UnknownQuestionError:
            return None
        position = self._evaluator.graph.position(source.id) + 1
        hides = cond.target_scenario_id in {self._evaluator.skip_scenario_id, self._evaluator.end_scenario_id}
        lead = f"{'Ẩn' if hides else 'Hiển thị'} khi Câu {position}"

        options: List[Option] = []
        phrase = _OPTION_PHRASES.get(cond.operator)
        if phrase is not None:
            options = _resolve_options(source, cond.comparand_value)
            if not options:
                return None
            summary = f"{lead} {phrase}: {', '.join(opt.text or opt.id for opt in options)}"
        elif cond.comparand_value is None:
            summary = f"{lead} {cond.operator.value}"
        else:
            summary = f"{lead} {cond.operator.value}: {cond.comparand_value}"

        return ConditionDescription(
            condition_index=index,
            source_question_id=source.id,
            source_position=position,
            operator=cond.operator.value,
            option_ids=[opt.id for opt in options],
            option_texts=[opt.text or opt.id for opt in options],
            target_scenario_id=cond.target_scenario_id,
            summary=summary,
        )


__all__ = ["ConditionInfoProjector"]
