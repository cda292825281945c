"""Helpers to compute visibility deltas and suppressed answers.

Exposes a single function that computes now_visible, now_hidden, and the list
of suppressed answers using a caller-provided probe for answer existence.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Tuple


def compute_visibility_delta(
    pre_visible: Iterable[str],
    post_visible: Iterable[str],
    has_answer: Callable[[str], bool],
    order: Sequence[str] | None = None,
) -> Tuple[List[str], List[str], List[str]]:
    """Compute visibility delta and suppressed answers.

    - now_visible: questions newly visible (in post but not in pre)
    - now_hidden: questions newly hidden (in pre but not in post)
    - suppressed_answers: subset of now_hidden that currently hold an answer

    Lists follow `order` (declared question order) when given, else sort by id.
    """
    pre_set = {str(qid).strip() for qid in pre_visible if qid is not None and str(qid).strip()}
    post_set = {str(qid).strip() for qid in post_visible if qid is not None and str(qid).strip()}

    if order is not None:
        position = {qid: i for i, qid in enumerate(order)}

        def _sorted(ids: set[str]) -> List[str]:
            return sorted(ids, key=lambda qid: (position.get(qid, len(position)), qid))
    else:
        def _sorted(ids: set[str]) -> List[str]:
            return sorted(ids)

    now_visible = _sorted(post_set - pre_set)
    now_hidden = _sorted(pre_set - post_set)
    suppressed_answers = [qid for qid in now_hidden if has_answer(qid)]
    return now_visible, now_hidden, suppressed_answers


__all__ = ["compute_visibility_delta"]
