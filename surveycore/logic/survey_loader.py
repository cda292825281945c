"""Build validated survey models from author-facing dictionaries.

The survey editor stores questions with free-form type labels, a tri-state
required flag expressed in several spellings, file types as a comma-separated
string and conditions with loosely named keys. This module normalizes all of
that into `Survey`/`Question` models. Type labels go through the type
registry; unknown labels degrade per its fallback policy rather than fail.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from surveycore.config import CoreConfig
from surveycore.errors import SurveyDefinitionError
from surveycore.logic.type_registry import DEFAULT_REGISTRY, TypeRegistry
from surveycore.models.question import Condition, ConditionOperator, Option, Question, RequiredLevel, Survey


logger = logging.getLogger(__name__)


_REQUIRED_TOKENS = {
    "bật": RequiredLevel.REQUIRED,
    "required": RequiredLevel.REQUIRED,
    "on": RequiredLevel.REQUIRED,
    "true": RequiredLevel.REQUIRED,
    "soft": RequiredLevel.SOFT,
    "tắt": RequiredLevel.OFF,
    "off": RequiredLevel.OFF,
    "false": RequiredLevel.OFF,
}

_OPERATOR_TOKENS = {
    "equals": ConditionOperator.EQUALS,
    "eq": ConditionOperator.EQUALS,
    "=": ConditionOperator.EQUALS,
    "==": ConditionOperator.EQUALS,
    "not_equals": ConditionOperator.NOT_EQUALS,
    "neq": ConditionOperator.NOT_EQUALS,
    "!=": ConditionOperator.NOT_EQUALS,
    "includes": ConditionOperator.INCLUDES,
    "not_includes": ConditionOperator.NOT_INCLUDES,
    "is_empty": ConditionOperator.IS_EMPTY,
    "is_answered": ConditionOperator.IS_ANSWERED,
    "contains": ConditionOperator.CONTAINS,
    "greater_than": ConditionOperator.GREATER_THAN,
    "gt": ConditionOperator.GREATER_THAN,
    ">": ConditionOperator.GREATER_THAN,
    "less_than": ConditionOperator.LESS_THAN,
    "lt": ConditionOperator.LESS_THAN,
    "<": ConditionOperator.LESS_THAN,
}


def _first(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def parse_required(value: Any) -> RequiredLevel:
    """Map the editor's required flag spellings onto RequiredLevel; missing means soft."""
    if value is None:
        return RequiredLevel.SOFT
    if isinstance(value, RequiredLevel):
        return value
    if isinstance(value, bool):
        return RequiredLevel.REQUIRED if value else RequiredLevel.OFF
    level = _REQUIRED_TOKENS.get(str(value).strip().lower())
    if level is None:
        raise SurveyDefinitionError(f"unrecognized required level: {value!r}")
    return level


def parse_operator(value: Any) -> Optional[ConditionOperator]:
    if isinstance(value, ConditionOperator):
        return value
    if value is None or str(value).strip() == "":
        return ConditionOperator.EQUALS
    return _OPERATOR_TOKENS.get(str(value).strip().lower())


def parse_file_types(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = [str(v) for v in value]
    out = [p.strip().lower().lstrip(".") for p in parts]
    return [p for p in out if p] or None


def _parse_options(raw_options: Any, question_id: str) -> List[Option]:
    options: List[Option] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_options or []):
        if isinstance(raw, Mapping):
            oid = _first(raw, "id", "option_id", default=str(index + 1))
            text = _first(raw, "text", "option_text", "label", default="")
            image = _first(raw, "image", "image_url")
        else:
            oid, text, image = str(raw), str(raw), None
        oid = str(oid)
        if oid in seen:
            raise SurveyDefinitionError(f"duplicate option id {oid!r} in question {question_id!r}")
        seen.add(oid)
        options.append(Option(id=oid, text=str(text), image=image))
    return options


def _parse_conditions(raw_conditions: Any, question_id: str) -> List[Condition]:
    conditions: List[Condition] = []
    for raw in raw_conditions or []:
        source = _first(raw, "source_question_id", "source", "question_id", "field")
        target = _first(raw, "target_scenario_id", "target", "scenario")
        operator = parse_operator(_first(raw, "operator", "op"))
        if operator is None:
            logger.warning(
                "condition_dropped question_id=%s reason=unknown_operator operator=%r",
                question_id,
                _first(raw, "operator", "op"),
            )
            continue
        if source is None or target is None:
            logger.warning("condition_dropped question_id=%s reason=incomplete raw=%r", question_id, raw)
            continue
        conditions.append(
            Condition(
                source_question_id=str(source),
                operator=operator,
                comparand_value=_first(raw, "comparand_value", "value", "comparand"),
                target_scenario_id=str(target),
            )
        )
    return conditions


def parse_question(
    raw: Mapping[str, Any],
    registry: TypeRegistry = DEFAULT_REGISTRY,
    config: Optional[CoreConfig] = None,
) -> Question:
    cfg = config or CoreConfig()
    qid = _first(raw, "id", "question_id")
    if qid is None or str(qid).strip() == "":
        raise SurveyDefinitionError("question id is required")
    qid = str(qid)
    options = _parse_options(_first(raw, "options", default=[]), qid)
    raw_type = _first(raw, "question_type", "type", "kind")
    kind = registry.resolve_kind(raw_type, has_options=bool(options))
    if registry.spec(kind).requires_options and not options:
        raise SurveyDefinitionError(f"question {qid!r} of kind {kind.value} requires options")

    default_scenario = _first(
        raw,
        "default_scenario_id",
        "default_scenario",
        "defaultScenario",
        default=cfg.scenarios.default_scenario_id,
    )
    try:
        return Question(
            id=qid,
            kind=kind,
            label=str(_first(raw, "label", "question_text", "title", default="")),
            help_text=_first(raw, "help_text", "helpText"),
            image=_first(raw, "image"),
            options=options,
            required=parse_required(_first(raw, "required")),
            max_length=_first(raw, "max_length", "maxLength"),
            numeric_only=bool(_first(raw, "numeric_only", "numericOnly", default=False)),
            allowed_file_types=parse_file_types(_first(raw, "allowed_file_types", "allowedFileTypes")),
            max_file_size_kb=_first(raw, "max_file_size_kb", "maxFileSizeKB", "maxFileSizeKb"),
            conditions=_parse_conditions(_first(raw, "conditions", default=[]), qid),
            default_scenario_id=str(default_scenario),
            raw_type=None if raw_type is None else str(raw_type),
        )
    except PydanticValidationError as e:
        raise SurveyDefinitionError(f"invalid question {qid!r}: {e}") from e


def load_survey(
    raw: Mapping[str, Any] | List[Mapping[str, Any]],
    registry: TypeRegistry = DEFAULT_REGISTRY,
    config: Optional[CoreConfig] = None,
) -> Survey:
    """Load a survey from a mapping with `questions`, or from a bare question list."""
    if isinstance(raw, Mapping):
        raw_questions = raw.get("questions") or []
        meta: Dict[str, Any] = {"id": raw.get("id"), "title": str(raw.get("title") or "")}
    else:
        raw_questions = raw
        meta = {}
    questions: List[Question] = []
    seen: set[str] = set()
    for raw_q in raw_questions:
        question = parse_question(raw_q, registry=registry, config=config)
        if question.id in seen:
            raise SurveyDefinitionError(f"duplicate question id {question.id!r}")
        seen.add(question.id)
        questions.append(question)
    survey = Survey(id=None if meta.get("id") is None else str(meta["id"]), title=meta.get("title", ""), questions=questions)
    logger.info("survey_loaded id=%s questions=%s", survey.id, len(questions))
    return survey


__all__ = [
    "load_survey",
    "parse_question",
    "parse_required",
    "parse_operator",
    "parse_file_types",
]
