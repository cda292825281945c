"""Functional tests for loading author-facing survey dictionaries."""

from __future__ import annotations

import pytest

from surveycore.errors import SurveyDefinitionError
from surveycore.logic.session import ResponseSession
from surveycore.logic.survey_loader import load_survey, parse_file_types, parse_operator, parse_required
from surveycore.models.question import ConditionOperator, RequiredLevel, Survey
from surveycore.models.question_kind import QuestionKind


def test_fixture_survey_loads_with_canonical_kinds(student_survey: Survey) -> None:
    kinds = {q.id: q.kind for q in student_survey.questions}
    assert kinds == {
        "q1": QuestionKind.SINGLE_CHOICE,
        "q2": QuestionKind.SHORT_TEXT,
        "q3": QuestionKind.MULTI_CHOICE,
        "q4": QuestionKind.NUMBER,
        "q5": QuestionKind.FILE,
        "q6": QuestionKind.LONG_TEXT,
    }
    q5 = student_survey.get("q5")
    assert q5.allowed_file_types == ["pdf", "doc"]
    assert q5.max_file_size_kb == 500
    assert student_survey.get("q2").raw_type == "Văn bản ngắn"
    assert student_survey.get("q2").default_scenario_id == "skip"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (True, RequiredLevel.REQUIRED),
        ("Bật", RequiredLevel.REQUIRED),
        ("Soft", RequiredLevel.SOFT),
        ("soft", RequiredLevel.SOFT),
        (False, RequiredLevel.OFF),
        ("Tắt", RequiredLevel.OFF),
        (None, RequiredLevel.SOFT),
    ],
)
def test_required_spellings(raw: object, expected: RequiredLevel) -> None:
    assert parse_required(raw) is expected


def test_unknown_required_spelling_is_rejected() -> None:
    with pytest.raises(SurveyDefinitionError):
        parse_required("maybe")


def test_operator_spellings() -> None:
    assert parse_operator("==") is ConditionOperator.EQUALS
    assert parse_operator(None) is ConditionOperator.EQUALS
    assert parse_operator("GT") is ConditionOperator.GREATER_THAN
    assert parse_operator("between") is None


def test_file_types_from_string_or_list() -> None:
    assert parse_file_types("png, gif, .PDF") == ["png", "gif", "pdf"]
    assert parse_file_types(["jpg", " "]) == ["jpg"]
    assert parse_file_types("") is None


def test_unknown_label_falls_back_by_options() -> None:
    survey = load_survey(
        [
            {"id": "a", "question_type": "Câu hỏi tự do"},
            {"id": "b", "question_type": "Câu hỏi tự do", "options": ["x", "y"]},
            {"id": "c", "question_type": "Ma trận (chọn điểm)"},
        ]
    )
    kinds = [q.kind for q in survey.questions]
    assert kinds == [QuestionKind.DEFAULT_SHORT_ANSWER, QuestionKind.SINGLE_CHOICE, QuestionKind.LONG_TEXT]
    assert [o.id for o in survey.get("b").options] == ["x", "y"]


def test_unknown_operator_condition_is_dropped() -> None:
    survey = load_survey(
        [
            {"id": "a", "type": "text"},
            {
                "id": "b",
                "type": "text",
                "conditions": [
                    {"field": "a", "operator": "between", "value": [1, 2], "scenario": "x"},
                    {"field": "a", "operator": "is_answered", "scenario": "y"},
                ],
            },
        ]
    )
    conds = survey.get("b").conditions
    assert len(conds) == 1
    assert conds[0].operator is ConditionOperator.IS_ANSWERED
    assert conds[0].target_scenario_id == "y"


def test_numeric_default_scenario_from_editor() -> None:
    survey = load_survey([{"id": "a", "type": "text", "defaultScenario": 1}])
    assert survey.get("a").default_scenario_id == "1"


@pytest.mark.parametrize(
    "raw",
    [
        [{"id": "a", "type": "text"}, {"id": "a", "type": "text"}],
        [{"id": "m", "type": "multiple_choice"}],
        [{"type": "text"}],
        [{"id": "o", "type": "single_choice", "options": [{"id": "1"}, {"id": "1"}]}],
    ],
)
def test_malformed_definitions_raise(raw: list) -> None:
    with pytest.raises(SurveyDefinitionError):
        load_survey(raw)


def test_editor_condition_on_multi_choice_fires_when_value_is_chosen() -> None:
    survey = load_survey(
        [
            {
                "id": "q1",
                "question_type": "Nhiều lựa chọn",
                "options": [{"id": "1", "option_text": "Toán"}, {"id": "2", "option_text": "Lý"}],
            },
            {
                "id": "q2",
                "question_type": "Văn bản ngắn",
                "defaultScenario": "skip",
                "conditions": [{"type": "question", "field": "q1", "value": "1", "target": "show"}],
            },
        ]
    )
    assert survey.get("q2").conditions[0].operator is ConditionOperator.EQUALS

    session = ResponseSession(survey)
    session.on_answer_select("q1", "1")
    session.on_answer_select("q1", "2")
    state = session.state("q2")
    assert state.active_scenario_id == "show"
    assert state.matched_condition_index == 0

    result = session.on_answer_select("q1", "1")
    assert result.visibility_delta.now_hidden == ["q2"]
