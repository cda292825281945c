"""Question model and conditional-branching engine for survey responses.

The package exposes a response session that wires the answer store, the
validator and the condition evaluator for a single respondent. Domain logic
lives in `surveycore/logic/` and data shapes in `surveycore/models/`.
"""

from __future__ import annotations

from surveycore.logic.session import ResponseSession
from surveycore.logic.survey_loader import load_survey

__all__ = ["ResponseSession", "load_survey"]
