"""Functional tests for configuration loading and logging setup."""

from __future__ import annotations

import json
import logging
import os

import pytest
from pydantic import ValidationError

from surveycore import config as config_module
from surveycore.config import CoreConfig, ScenarioConfig, load_config
from surveycore.logging_setup import _dict_config, configure_logging


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("SURVEYCORE_"):
            monkeypatch.delenv(key, raising=False)
    yield tmp_path


def test_defaults_without_sources() -> None:
    cfg = load_config()
    assert cfg == CoreConfig()
    assert cfg.scenarios.skip_scenario_id == "skip"
    assert cfg.scenarios.end_scenario_id == "end"
    assert cfg.validation.enforce_numeric_bound is True
    assert cfg.validation.default_short_text_max_length is None


def test_json_base_then_file_then_env_precedence(_isolated_config, monkeypatch: pytest.MonkeyPatch) -> None:
    root = _isolated_config
    (root / "surveycore_config.json").write_text(
        json.dumps({"scenarios": {"skip_scenario_id": "hide"}, "validation": {"default_rating_scale": 10}}),
        encoding="utf-8",
    )
    cfg = load_config()
    assert cfg.scenarios.skip_scenario_id == "hide"
    assert cfg.validation.default_rating_scale == 10

    (root / "config").mkdir()
    (root / "config" / "scenarios.skip").write_text("hidden\n", encoding="utf-8")
    assert load_config().scenarios.skip_scenario_id == "hidden"

    monkeypatch.setenv("SURVEYCORE_SKIP_SCENARIO_ID", "bo_qua")
    monkeypatch.setenv("SURVEYCORE_ENFORCE_NUMERIC_BOUND", "false")
    monkeypatch.setenv("SURVEYCORE_DEFAULT_SHORT_TEXT_MAX_LENGTH", "256")
    cfg = load_config()
    assert cfg.scenarios.skip_scenario_id == "bo_qua"
    assert cfg.validation.enforce_numeric_bound is False
    assert cfg.validation.default_short_text_max_length == 256


def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SURVEYCORE_DEFAULT_RATING_SCALE", "0")
    with pytest.raises(ValidationError):
        load_config()


def test_reserved_scenarios_must_differ() -> None:
    with pytest.raises(ValidationError):
        ScenarioConfig(skip_scenario_id="x", end_scenario_id="x")
    with pytest.raises(ValidationError):
        ScenarioConfig(default_scenario_id="skip")


def test_configure_logging_leaves_existing_handlers_alone(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    existing = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [existing])
    configure_logging("DEBUG")
    assert root.handlers == [existing]


def test_logging_dict_config_routes_package_loggers() -> None:
    cfg = _dict_config("DEBUG")
    assert cfg["loggers"]["surveycore"]["level"] == "DEBUG"
    assert cfg["handlers"]["console"]["stream"] == "ext://sys.stdout"
    assert cfg["disable_existing_loggers"] is False
    assert config_module.ENV_PREFIX == "SURVEYCORE_"
