"""Condition dependency graph.

Edges run from a source question to every question whose conditions read it.
The graph scopes re-evaluation (only the downstream closure of a changed
question is recomputed) and rejects condition sets that reference unknown or
later questions, or that would close a cycle.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set
import logging

from surveycore.errors import CYCLE, FORWARD_REFERENCE, UNKNOWN_SOURCE, ConfigurationError
from surveycore.models.question import Condition


logger = logging.getLogger(__name__)


class DependencyGraph:
    def __init__(self, order: Sequence[str]) -> None:
        self._order: List[str] = list(order)
        self._position: Dict[str, int] = {qid: i for i, qid in enumerate(self._order)}
        # source -> dependents, dependent -> sources
        self._dependents: Dict[str, Set[str]] = {qid: set() for qid in self._order}
        self._sources: Dict[str, Set[str]] = {qid: set() for qid in self._order}

    def position(self, question_id: str) -> int:
        return self._position[question_id]

    def sources_of(self, question_id: str) -> Set[str]:
        return set(self._sources.get(question_id, ()))

    def dependents_of(self, question_id: str) -> Set[str]:
        return set(self._dependents.get(question_id, ()))

    def check(self, question_id: str, conditions: Iterable[Condition]) -> Set[str]:
        """Return the source ids of `conditions`, raising ConfigurationError on a defect.

        Does not modify the graph.
        """
        if question_id not in self._position:
            raise ConfigurationError(question_id, UNKNOWN_SOURCE, "owning question is not part of the survey")
        sources: Set[str] = set()
        for cond in conditions:
            src = cond.source_question_id
            if src not in self._position:
                raise ConfigurationError(question_id, UNKNOWN_SOURCE, f"source={src}")
            if src == question_id:
                raise ConfigurationError(question_id, CYCLE, "condition reads its own question")
            if self._position[src] > self._position[question_id]:
                raise ConfigurationError(question_id, FORWARD_REFERENCE, f"source={src}")
            sources.add(src)
        if self._reaches_any(question_id, sources):
            raise ConfigurationError(question_id, CYCLE, f"sources={sorted(sources)}")
        return sources

    def _reaches_any(self, start: str, targets: Set[str]) -> bool:
        """True if any of `targets` is downstream of `start` (adding edges would close a cycle)."""
        if not targets:
            return False
        seen: Set[str] = set()
        stack = [start]
        while stack:
            cur = stack.pop()
            if cur in seen:
                continue
            seen.add(cur)
            for nxt in self._dependents.get(cur, ()):
                if nxt in targets:
                    return True
                stack.append(nxt)
        return False

    def set_sources(self, question_id: str, sources: Iterable[str]) -> None:
        """Replace the incoming edges of `question_id` (callers run `check` first)."""
        self.clear_sources(question_id)
        for src in sources:
            self._dependents[src].add(question_id)
            self._sources[question_id].add(src)

    def clear_sources(self, question_id: str) -> None:
        for src in self._sources.get(question_id, set()):
            self._dependents[src].discard(question_id)
        self._sources[question_id] = set()

    def downstream(self, question_id: str) -> List[str]:
        """Transitive dependents of `question_id`, in declared order."""
        seen: Set[str] = set()
        stack = list(self._dependents.get(question_id, ()))
        while stack:
            cur = stack.pop()
            if cur in seen:
                continue
            seen.add(cur)
            stack.extend(self._dependents.get(cur, ()))
        return sorted(seen, key=self._position.__getitem__)

    def upstream(self, question_id: str) -> List[str]:
        """Transitive sources of `question_id`, in declared order."""
        seen: Set[str] = set()
        stack = list(self._sources.get(question_id, ()))
        while stack:
            cur = stack.pop()
            if cur in seen:
                continue
            seen.add(cur)
            stack.extend(self._sources.get(cur, ()))
        return sorted(seen, key=self._position.__getitem__)

    def topological_order(self, question_ids: Optional[Iterable[str]] = None) -> List[str]:
        """Declared order restricted to `question_ids`; valid because edges only point forward."""
        if question_ids is None:
            return list(self._order)
        wanted = set(question_ids)
        return [qid for qid in self._order if qid in wanted]


__all__ = ["DependencyGraph"]
