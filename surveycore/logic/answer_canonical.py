"""Canonicalization helpers for answer values.

Provides the stable string representation used when conditions compare an
answer against an author-supplied comparand.
"""

from __future__ import annotations

import math
from typing import List, Optional

from surveycore.models.answer import Answer
from surveycore.models.question import Question
from surveycore.models.question_kind import KindSpec


def canonicalize_value(value: object) -> Optional[str]:
    """Return a stable string representation for a scalar value.

    - Booleans -> "true" / "false"
    - Numbers  -> integer form when integral, else decimal string
    - Text     -> stripped string; "TRUE"/"False" folded to lower case
    - None     -> None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        f = float(value)
        if math.isfinite(f) and float(int(f)) == f:
            return str(int(f))
        return str(f)
    s = str(value).strip()
    return s.lower() if s.lower() in {"true", "false"} else s


def parse_number(value: object) -> Optional[float]:
    """Parse a finite number from text or a numeric value; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
    else:
        s = str(value).strip()
        # float() accepts digit separators such as "1_000"; typed numbers do not
        if not s or "_" in s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    return f if math.isfinite(f) else None


def answer_tokens(
    answer: Optional[Answer],
    question: Optional[Question] = None,
    spec: Optional[KindSpec] = None,
) -> List[str]:
    """Canonical tokens an answer can be compared by.

    Selections contribute each selected option id and, when the question is
    known, that option's text; text answers contribute the canonical text.
    With `spec`, only the field the kind declares contributes.
    """
    if answer is None:
        return []
    answer = answer.field_view(spec)
    tokens: List[str] = []
    if answer.selection is not None:
        for sel in answer.selected_ids():
            tok = canonicalize_value(sel)
            if tok is not None:
                tokens.append(tok)
            if question is not None:
                opt = question.option_by_id(sel)
                if opt is not None and opt.text:
                    tokens.append(canonicalize_value(opt.text) or "")
        return [t for t in tokens if t != ""]
    tok = canonicalize_value(answer.text)
    return [tok] if tok else []


__all__ = ["canonicalize_value", "parse_number", "answer_tokens"]
