"""Step definitions for conditional branching scenarios.

Each scenario builds a `ResponseSession` over a YAML fixture and drives it
through the same handlers an embedding UI calls.
"""

from __future__ import annotations

from typing import List
import logging

import yaml
from behave import given, then, when

from surveycore.logic.survey_loader import load_survey
from surveycore.logic.session import ResponseSession
from surveycore.models.question import Condition


logger = logging.getLogger(__name__)


def _ids(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _remember(context, result) -> None:
    context.last_result = result
    context.last_delta = result.visibility_delta


# ------------------
# Setup
# ------------------


@given('the survey fixture "{name}"')
def step_load_fixture(context, name: str) -> None:
    with open(context.fixtures_dir / name, "r", encoding="utf-8") as fh:
        context.survey = load_survey(yaml.safe_load(fh))


@given("a fresh response session")
def step_fresh_session(context) -> None:
    context.session = ResponseSession(context.survey, config=context.core_config)


@given("the respondent has answered the student branch")
def step_answer_branch(context) -> None:
    session: ResponseSession = context.session
    session.on_answer_select("q1", "Yes")
    session.on_text_change("q2", "HUST")
    _remember(context, session.on_answer_select("q3", "math"))
    assert session.state("q4").visible, session.visibility()


# ------------------
# Actions
# ------------------


@when('the respondent selects "{value}" for "{question_id}"')
def step_select(context, value: str, question_id: str) -> None:
    _remember(context, context.session.on_answer_select(question_id, value))


@when('the respondent types "{text}" into "{question_id}"')
def step_type(context, text: str, question_id: str) -> None:
    _remember(context, context.session.on_text_change(question_id, text))


@when('the respondent selects the file "{filename}" of {size_kb:d} KB for "{question_id}"')
def step_file(context, filename: str, size_kb: int, question_id: str) -> None:
    _remember(context, context.session.on_file_selected(question_id, filename, size_kb * 1024))


@when('conditions for "{question_id}" are registered reading "{source_id}" with target "{target}"')
def step_register(context, question_id: str, source_id: str, target: str) -> None:
    cond = Condition(source_question_id=source_id, operator="is_answered", target_scenario_id=target)
    context.last_delta = context.session.register_conditions(question_id, [cond])


# ------------------
# Assertions
# ------------------


@then('the presented questions are "{ids}"')
def step_presented(context, ids: str) -> None:
    actual = [q.id for q in context.session.presented_questions()]
    assert actual == _ids(ids), f"presented={actual}"


@then('"{question_id}" becomes visible')
def step_now_visible(context, question_id: str) -> None:
    assert context.last_delta.now_visible == [question_id], context.last_delta


@then('the questions "{ids}" become hidden')
def step_now_hidden(context, ids: str) -> None:
    assert context.last_delta.now_hidden == _ids(ids), context.last_delta


@then('the answers of "{ids}" are suppressed')
def step_suppressed(context, ids: str) -> None:
    assert context.last_delta.suppressed_answers == _ids(ids), context.last_delta


@then('the active scenario of "{question_id}" is "{scenario_id}"')
def step_active_scenario(context, question_id: str, scenario_id: str) -> None:
    assert context.session.state(question_id).active_scenario_id == scenario_id


@then('the payload contains only "{question_id}"')
def step_payload_only(context, question_id: str) -> None:
    payload = context.session.payload()
    assert [item["question_id"] for item in payload] == [question_id], payload


@then('the validation outcome is "{outcome}"')
def step_validation_outcome(context, outcome: str) -> None:
    validation = context.last_result.validation
    if outcome == "ok":
        assert validation.ok, validation
    else:
        assert not validation.ok and validation.reason.value == outcome, validation


@then("submission is allowed")
def step_submission_allowed(context) -> None:
    verdict = context.session.gating()
    assert verdict.ok, verdict


@then('submission is blocked by "{question_id}" with "{reason}"')
def step_submission_blocked(context, question_id: str, reason: str) -> None:
    verdict = context.session.gating()
    assert not verdict.ok
    assert [(i.question_id, i.reason.value) for i in verdict.blocking_items] == [(question_id, reason)], verdict


@then('"{question_id}" reports configuration error "{code}"')
def step_configuration_error(context, question_id: str, code: str) -> None:
    info = context.session.describe(question_id)
    assert info.configuration_error == code, info
    assert context.session.state(question_id).branching_enabled is False
