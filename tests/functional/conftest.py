from __future__ import annotations

"""Functional test bootstrap for the survey core.

Survey fixtures live as YAML under tests/fixtures/ and are loaded through the
same loader the embedding UI uses, so tests exercise the raw-label path.
"""

import pathlib
from typing import Any, Dict

import pytest
import yaml

from surveycore.logic.survey_loader import load_survey
from surveycore.logic.session import ResponseSession
from surveycore.models.question import Survey


_FIXTURES = pathlib.Path(__file__).resolve().parents[1] / "fixtures"


def load_fixture(name: str) -> Dict[str, Any]:
    with open(_FIXTURES / name, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


@pytest.fixture()
def student_survey() -> Survey:
    return load_survey(load_fixture("student_survey.yaml"))


@pytest.fixture()
def session(student_survey: Survey) -> ResponseSession:
    return ResponseSession(student_survey)
