"""Condition evaluation and scenario resolution for conditional branching.

For each question the evaluator walks its conditions in declared order; the
first condition whose operator matches the source question's current answer
selects the active scenario, otherwise the question's default scenario
applies. A question is hidden when its scenario is the configured skip or end
scenario. Answers of hidden questions are treated as absent when other
conditions read them, so visibility propagates along the dependency graph.

Resolved states are memoized. The evaluator subscribes to the answer store
and, on every mutation, invalidates and eagerly recomputes only the
transitive dependents of the changed question.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional
import logging

from surveycore.config import CoreConfig
from surveycore.errors import ConfigurationError, UnknownQuestionError
from surveycore.logic.answer_store import AnswerStore
from surveycore.logic.condition_operators import evaluate_operator
from surveycore.logic.dependency_graph import DependencyGraph
from surveycore.logic.events import SCENARIO_CHANGED, EventLog
from surveycore.logic.type_registry import DEFAULT_REGISTRY, TypeRegistry
from surveycore.logic.visibility_delta import compute_visibility_delta
from surveycore.models.answer import Answer
from surveycore.models.question import Condition, Question, Survey
from surveycore.models.visibility import QuestionState, ScenarioChange, VisibilityDelta


logger = logging.getLogger(__name__)


class ConditionEvaluator:
    def __init__(
        self,
        survey: Survey,
        store: AnswerStore,
        config: Optional[CoreConfig] = None,
        events: Optional[EventLog] = None,
        registry: Optional[TypeRegistry] = None,
    ) -> None:
        self._config = config or CoreConfig()
        self._registry = registry or DEFAULT_REGISTRY
        self._store = store
        self._events = events
        self._questions: Dict[str, Question] = {q.id: q for q in survey.questions}
        self._order: List[str] = [q.id for q in survey.questions]
        self._graph = DependencyGraph(self._order)
        self._conditions: Dict[str, List[Condition]] = {}
        self._errors: Dict[str, ConfigurationError] = {}
        self._cache: Dict[str, QuestionState] = {}
        self._last_delta = VisibilityDelta()
        # Number of single-question resolutions performed; exposes recompute scope
        self.evaluations = 0

        for q in survey.questions:
            self._install(q.id, list(q.conditions))
        # Warm the cache so the first mutation can report what it changed
        self.evaluate_all()
        store.subscribe(self._on_answer_changed)

    # -- configuration -------------------------------------------------

    @property
    def skip_scenario_id(self) -> str:
        return self._config.scenarios.skip_scenario_id

    @property
    def end_scenario_id(self) -> str:
        return self._config.scenarios.end_scenario_id

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    @property
    def configuration_errors(self) -> Dict[str, ConfigurationError]:
        return dict(self._errors)

    def question(self, question_id: str) -> Question:
        return self._question(question_id)

    def conditions_of(self, question_id: str) -> List[Condition]:
        self._question(question_id)
        return list(self._conditions.get(question_id, []))

    def _question(self, question_id: str) -> Question:
        try:
            return self._questions[question_id]
        except KeyError:
            raise UnknownQuestionError(question_id) from None

    def _install(self, question_id: str, conditions: List[Condition]) -> Optional[ConfigurationError]:
        self._conditions[question_id] = conditions
        try:
            sources = self._graph.check(question_id, conditions)
        except ConfigurationError as err:
            self._graph.clear_sources(question_id)
            self._errors[question_id] = err
            logger.warning(
                "branching_disabled question_id=%s code=%s detail=%s",
                question_id,
                err.code,
                err.detail,
            )
            return err
        self._graph.set_sources(question_id, sources)
        self._errors.pop(question_id, None)
        return None

    def register_conditions(self, question_id: str, conditions: Iterable[Condition]) -> VisibilityDelta:
        """Replace a question's conditions and re-resolve it and its dependents.

        A defective condition set disables branching for the question (it
        resolves to its default scenario); the error is available through
        `configuration_errors` and is not raised.
        """
        self._question(question_id)
        affected = [question_id] + self._graph.downstream(question_id)
        pre = {qid: self.state(qid) for qid in affected}
        self._install(question_id, list(conditions))
        # Dependents may have changed with the new edges
        affected = [question_id] + [q for q in self._graph.downstream(question_id) if q not in pre]
        for qid in affected:
            pre.setdefault(qid, self.state(qid))
        return self._recompute(list(pre.keys()), pre)

    # -- resolution ----------------------------------------------------

    def _hidden_scenarios(self) -> set[str]:
        return {self.skip_scenario_id, self.end_scenario_id}

    def _answer_of(self, question_id: str) -> Optional[Answer]:
        """Stored answer restricted to the field the question's kind declares."""
        answer = self._store.get(question_id)
        if answer is None:
            return None
        return answer.field_view(self._registry.spec(self._questions[question_id].kind))

    def _has_answer(self, question_id: str) -> bool:
        answer = self._answer_of(question_id)
        return answer is not None and not answer.is_empty()

    def _resolve(self, question_id: str) -> QuestionState:
        self.evaluations += 1
        question = self._questions[question_id]
        if question_id in self._errors:
            scenario = question.default_scenario_id
            return QuestionState(
                question_id=question_id,
                visible=scenario not in self._hidden_scenarios(),
                active_scenario_id=scenario,
                branching_enabled=False,
            )

        scenario = question.default_scenario_id
        matched: Optional[int] = None
        for index, cond in enumerate(self._conditions.get(question_id, [])):
            source_state = self.state(cond.source_question_id)
            answer = self._answer_of(cond.source_question_id) if source_state.visible else None
            source_question = self._questions.get(cond.source_question_id)
            if evaluate_operator(cond.operator, answer, cond.comparand_value, source_question):
                scenario = cond.target_scenario_id
                matched = index
                break
        return QuestionState(
            question_id=question_id,
            visible=scenario not in self._hidden_scenarios(),
            active_scenario_id=scenario,
            matched_condition_index=matched,
        )

    def state(self, question_id: str) -> QuestionState:
        self._question(question_id)
        cached = self._cache.get(question_id)
        if cached is None:
            cached = self._resolve(question_id)
            self._cache[question_id] = cached
        return cached

    def evaluate_all(self) -> Dict[str, QuestionState]:
        return {qid: self.state(qid) for qid in self._order}

    def is_visible(self, question_id: str) -> bool:
        return self.state(question_id).visible

    def active_scenario(self, question_id: str) -> str:
        return self.state(question_id).active_scenario_id

    def presented_ids(self) -> List[str]:
        """Visible questions in declared order, cut at the first end-of-survey resolution."""
        out: List[str] = []
        for qid in self._order:
            st = self.state(qid)
            if st.active_scenario_id == self.end_scenario_id:
                break
            if st.visible:
                out.append(qid)
        return out

    # -- re-evaluation -------------------------------------------------

    def _on_answer_changed(self, question_id: str) -> None:
        self._last_delta = self.reevaluate(question_id)

    def take_last_delta(self) -> VisibilityDelta:
        delta, self._last_delta = self._last_delta, VisibilityDelta()
        return delta

    def reevaluate(self, question_id: str) -> VisibilityDelta:
        """Recompute the dependents of a changed question and report what moved."""
        self._question(question_id)
        affected = self._graph.downstream(question_id)
        if not affected:
            return VisibilityDelta()
        pre = {qid: self.state(qid) for qid in affected}
        return self._recompute(affected, pre)

    def _recompute(self, affected: List[str], pre: Dict[str, QuestionState]) -> VisibilityDelta:
        ordered = self._graph.topological_order(affected)
        for qid in ordered:
            self._cache.pop(qid, None)
        post = {qid: self.state(qid) for qid in ordered}

        now_visible, now_hidden, suppressed = compute_visibility_delta(
            [qid for qid in ordered if pre[qid].visible],
            [qid for qid in ordered if post[qid].visible],
            self._has_answer,
            order=self._order,
        )
        changes: List[ScenarioChange] = []
        for qid in ordered:
            before = pre[qid].active_scenario_id
            after = post[qid].active_scenario_id
            if before != after:
                changes.append(ScenarioChange(question_id=qid, previous=before, current=after))
                if self._events is not None:
                    self._events.publish(
                        SCENARIO_CHANGED,
                        {"question_id": qid, "previous": before, "current": after},
                    )
        if changes:
            logger.info(
                "scenario_reevaluated affected=%s now_visible=%s now_hidden=%s",
                ordered,
                now_visible,
                now_hidden,
            )
        return VisibilityDelta(
            now_visible=now_visible,
            now_hidden=now_hidden,
            suppressed_answers=suppressed,
            scenario_changes=changes,
        )


__all__ = ["ConditionEvaluator"]
