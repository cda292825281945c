"""Domain event constants and publisher.

Defines event type constants and a publish() callable used by answer
mutations and scenario re-evaluation.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

ANSWER_SAVED = "answer.saved"
ANSWER_CLEARED = "answer.cleared"
SCENARIO_CHANGED = "scenario.changed"


class EventLog:
    """Per-session event buffer.

    Events are logged for observability and buffered so the embedding UI (and
    tests) can drain them after each interaction.
    """

    def __init__(self) -> None:
        self._buffer: List[Dict[str, Any]] = []

    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        logger.info("event_publish type=%s payload=%s", event_type, payload)
        self._buffer.append({"type": event_type, "payload": payload})

    def drain(self, clear: bool = True) -> List[Dict[str, Any]]:
        """Return buffered domain events; optionally clear the buffer."""
        events = list(self._buffer)
        if clear:
            self._buffer.clear()
        return events

    def __len__(self) -> int:
        return len(self._buffer)


__all__ = [
    "ANSWER_SAVED",
    "ANSWER_CLEARED",
    "SCENARIO_CHANGED",
    "EventLog",
]
