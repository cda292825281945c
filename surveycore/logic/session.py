"""Response session: the boundary between UI events and the core.

A session owns one answer store and wires the validator, the condition
evaluator and the condition-info projector around it. UI handlers dispatch on
the question's canonical kind (never on raw type labels), mutate the store,
and return the advisory validation plus the visibility delta computed inline
by the evaluator.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
import logging

from surveycore.config import CoreConfig
from surveycore.errors import AnswerShapeError, SurveyDefinitionError, UnknownQuestionError
from surveycore.logic.answer_store import AnswerStore
from surveycore.logic.condition_evaluator import ConditionEvaluator
from surveycore.logic.condition_info import ConditionInfoProjector
from surveycore.logic.events import ANSWER_CLEARED, ANSWER_SAVED, EventLog
from surveycore.logic.gating import evaluate_gating
from surveycore.logic.type_registry import DEFAULT_REGISTRY, TypeRegistry
from surveycore.logic.validation import Validator
from surveycore.models.answer import Answer
from surveycore.models.question import Condition, Question, Survey
from surveycore.models.question_kind import KindSpec, QuestionKind
from surveycore.models.results import AnswerResult, GatingVerdict, ValidationResult
from surveycore.models.visibility import ConditionInfo, QuestionState, VisibilityDelta


logger = logging.getLogger(__name__)


class ResponseSession:
    def __init__(
        self,
        survey: Survey,
        config: Optional[CoreConfig] = None,
        answers: Optional[Iterable[Answer]] = None,
        registry: TypeRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.survey = survey
        self.config = config or CoreConfig()
        self.registry = registry
        self._questions: Dict[str, Question] = {q.id: q for q in survey.questions}
        for q in survey.questions:
            if registry.spec(q.kind).requires_options and not q.options:
                raise SurveyDefinitionError(f"question {q.id!r} of kind {q.kind.value} requires options")

        self.events = EventLog()
        specs = {q.id: registry.spec(q.kind) for q in survey.questions}
        self.store = AnswerStore(self._questions.keys(), specs=specs)
        if answers:
            self.store.load(answers)
        self.validator = Validator(self.config, registry)
        self.evaluator = ConditionEvaluator(survey, self.store, self.config, events=self.events, registry=registry)
        self.projector = ConditionInfoProjector(self.evaluator)

    # -- lookups -------------------------------------------------------

    def question(self, question_id: str) -> Question:
        try:
            return self._questions[question_id]
        except KeyError:
            raise UnknownQuestionError(question_id) from None

    def _spec(self, question: Question) -> KindSpec:
        return self.registry.spec(question.kind)

    # -- UI event handlers ---------------------------------------------

    def on_answer_select(self, question_id: str, value: Any, kind_label: Optional[str] = None) -> AnswerResult:
        """Apply a choice or typed value using the question's own kind.

        `kind_label` is the raw type label the widget was rendered with; when it
        canonicalizes to a different kind the mismatch is logged and the
        question's registered kind wins.
        """
        question = self.question(question_id)
        if kind_label is not None:
            label_kind = self.registry.resolve_kind(kind_label, has_options=bool(question.options))
            if label_kind is not question.kind:
                logger.warning(
                    "kind_label_mismatch question_id=%s label=%r label_kind=%s kind=%s",
                    question_id,
                    kind_label,
                    label_kind.value,
                    question.kind.value,
                )
        spec = self._spec(question)
        if spec.is_multi:
            self.store.toggle_multi_selection(question_id, str(value))
        elif spec.is_selection:
            self.store.set_single_selection(question_id, str(value))
        elif question.kind is QuestionKind.FILE:
            self.store.set_file(question_id, str(value))
        else:
            self.store.set_text(question_id, "" if value is None else str(value))
        return self._result(question, ANSWER_SAVED)

    def on_text_change(self, question_id: str, text: Optional[str]) -> AnswerResult:
        question = self.question(question_id)
        if not self._spec(question).is_text:
            raise AnswerShapeError(question_id, question.kind.value, "set_text")
        self.store.set_text(question_id, text)
        return self._result(question, ANSWER_SAVED)

    def on_text_blur(self, question_id: str) -> AnswerResult:
        """Trim surrounding whitespace of a text answer and report its validation."""
        question = self.question(question_id)
        current = self.store.get(question_id)
        if (
            current is not None
            and self._spec(question).is_text
            and question.kind is not QuestionKind.FILE
            and current.text is not None
            and current.text != current.text.strip()
        ):
            self.store.set_text(question_id, current.text.strip())
            return self._result(question, ANSWER_SAVED)
        return AnswerResult(question_id=question_id, validation=self.validate(question_id))

    def on_file_selected(self, question_id: str, filename: str, size_bytes: Optional[int] = None) -> AnswerResult:
        question = self.question(question_id)
        if question.kind is not QuestionKind.FILE:
            raise AnswerShapeError(question_id, question.kind.value, "set_file")
        self.store.set_file(question_id, filename, size_bytes)
        return self._result(question, ANSWER_SAVED)

    def clear(self, question_id: str) -> AnswerResult:
        question = self.question(question_id)
        removed = self.store.clear(question_id)
        if not removed:
            return AnswerResult(question_id=question_id, validation=self.validate(question_id))
        return self._result(question, ANSWER_CLEARED)

    def _result(self, question: Question, event_type: str) -> AnswerResult:
        delta = self.evaluator.take_last_delta()
        answer = self.store.get(question.id)
        self.events.publish(
            event_type,
            {"question_id": question.id, "answer": answer.to_payload(self._spec(question)) if answer is not None else None},
        )
        return AnswerResult(
            question_id=question.id,
            validation=self.validator.check(question, answer),
            visibility_delta=delta,
        )

    # -- authoring preview -----------------------------------------------

    def register_conditions(self, question_id: str, conditions: Iterable[Condition]) -> VisibilityDelta:
        self.question(question_id)
        return self.evaluator.register_conditions(question_id, conditions)

    # -- reads ---------------------------------------------------------

    def validate(self, question_id: str) -> ValidationResult:
        question = self.question(question_id)
        return self.validator.check(question, self.store.get(question_id))

    def visibility(self) -> Dict[str, QuestionState]:
        return self.evaluator.evaluate_all()

    def state(self, question_id: str) -> QuestionState:
        return self.evaluator.state(question_id)

    def describe(self, question_id: str) -> ConditionInfo:
        return self.projector.describe(question_id)

    def presented_questions(self) -> List[Question]:
        return [self._questions[qid] for qid in self.evaluator.presented_ids()]

    def next_question(self, after_id: Optional[str] = None) -> Optional[Question]:
        """First presented question after `after_id` (or the first one), None at the end."""
        presented = self.evaluator.presented_ids()
        if after_id is None:
            return self._questions[presented[0]] if presented else None
        position = self.evaluator.graph.position
        after_pos = position(self.question(after_id).id)
        for qid in presented:
            if position(qid) > after_pos:
                return self._questions[qid]
        return None

    def gating(self) -> GatingVerdict:
        return evaluate_gating(self.presented_questions(), self.store, self.validator)

    def payload(self, include_hidden: bool = False) -> List[dict]:
        """Answers to hand off; answers of non-presented questions are suppressed by default."""
        order = self.survey.question_ids() if include_hidden else self.evaluator.presented_ids()
        return self.store.payload(order)


__all__ = ["ResponseSession"]
