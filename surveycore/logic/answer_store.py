"""Answer store owned by a single response session.

Holds one `Answer` per question id and applies the mutation operations the
response UI triggers. Every mutation replaces the record with a value
computed only from the previous record and the operands, then notifies
subscribers (the condition evaluator) with the changed question id.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional
import logging

from surveycore.errors import UnknownQuestionError
from surveycore.models.answer import Answer
from surveycore.models.question_kind import KindSpec


logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


def toggle_selection(current: object, option_id: str) -> List[str]:
    """Multi-select toggle over a stored selection value.

    A non-list value (missing or a stale scalar from a single-selection state)
    is replaced by `[option_id]`; the scalar is dropped, not merged. A list
    gains `option_id` when absent and loses it when present.
    """
    oid = str(option_id)
    if not isinstance(current, list):
        return [oid]
    items = [str(x) for x in current]
    if oid in items:
        return [x for x in items if x != oid]
    return items + [oid]


class AnswerStore:
    def __init__(
        self,
        question_ids: Optional[Iterable[str]] = None,
        specs: Optional[Mapping[str, KindSpec]] = None,
    ) -> None:
        self._known: Optional[set[str]] = set(question_ids) if question_ids is not None else None
        # Declared answer field per question; reads ignore the other field
        self._specs: Dict[str, KindSpec] = dict(specs or {})
        self._answers: Dict[str, Answer] = {}
        self._listeners: List[Listener] = []

    def load(self, answers: Iterable[Answer]) -> None:
        """Install previously collected answers as-is, without notifying subscribers.

        Used when resuming a session before the evaluator is attached; stored
        shapes are not coerced (a stale scalar on a multi-select question is
        converted by the first toggle, and a stale field of the other shape is
        ignored by every read).
        """
        for answer in answers:
            self._require_known(answer.question_id)
            self._answers[answer.question_id] = answer

    # -- subscriptions -------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, question_id: str) -> None:
        for listener in list(self._listeners):
            listener(question_id)

    def _require_known(self, question_id: str) -> None:
        if self._known is not None and question_id not in self._known:
            raise UnknownQuestionError(question_id)

    def _put(self, answer: Answer) -> Answer:
        self._answers[answer.question_id] = answer
        logger.debug(
            "answer_mutated question_id=%s text=%r selection=%r",
            answer.question_id,
            answer.text,
            answer.selection,
        )
        self._notify(answer.question_id)
        return answer

    # -- mutations -----------------------------------------------------

    def set_text(self, question_id: str, value: Optional[str]) -> Answer:
        self._require_known(question_id)
        return self._put(Answer(question_id=question_id, text="" if value is None else str(value)))

    def set_single_selection(self, question_id: str, option_id: str) -> Answer:
        self._require_known(question_id)
        return self._put(Answer(question_id=question_id, selection=str(option_id)))

    def toggle_multi_selection(self, question_id: str, option_id: str) -> Answer:
        self._require_known(question_id)
        prev = self._answers.get(question_id)
        current = prev.selection if prev is not None else None
        return self._put(Answer(question_id=question_id, selection=toggle_selection(current, option_id)))

    def set_file(self, question_id: str, filename: str, size_bytes: Optional[int] = None) -> Answer:
        """Record a chosen file by name; size is kept in KB for constraint checks."""
        self._require_known(question_id)
        size_kb = (float(size_bytes) / 1024.0) if size_bytes is not None else None
        return self._put(Answer(question_id=question_id, text=str(filename), file_size_kb=size_kb))

    def clear(self, question_id: str) -> bool:
        self._require_known(question_id)
        removed = self._answers.pop(question_id, None)
        if removed is None:
            return False
        logger.debug("answer_cleared question_id=%s", question_id)
        self._notify(question_id)
        return True

    # -- reads ---------------------------------------------------------

    def get(self, question_id: str) -> Optional[Answer]:
        return self._answers.get(question_id)

    def spec_of(self, question_id: str) -> Optional[KindSpec]:
        return self._specs.get(question_id)

    def view(self, question_id: str) -> Optional[Answer]:
        """Stored answer restricted to the field its question's kind declares."""
        ans = self._answers.get(question_id)
        if ans is None:
            return None
        return ans.field_view(self._specs.get(question_id))

    def has_answer(self, question_id: str) -> bool:
        ans = self._answers.get(question_id)
        return ans is not None and not ans.is_empty(self._specs.get(question_id))

    def snapshot(self) -> Dict[str, Answer]:
        return dict(self._answers)

    def payload(self, order: Optional[Iterable[str]] = None) -> List[dict]:
        """Answers as hand-off dicts, empty records omitted.

        When `order` is given, only those question ids are emitted, in that order.
        """
        ids = list(order) if order is not None else list(self._answers.keys())
        out: List[dict] = []
        for qid in ids:
            ans = self._answers.get(qid)
            spec = self._specs.get(qid)
            if ans is None or ans.is_empty(spec):
                continue
            out.append(ans.to_payload(spec))
        return out

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._answers

    def __len__(self) -> int:
        return len(self._answers)


__all__ = ["AnswerStore", "toggle_selection"]
