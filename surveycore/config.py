"""Configuration utilities for the survey core.

This module loads engine configuration with the following rules:
- Primary source: `surveycore_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("surveycore_config.json")
ENV_PREFIX = "SURVEYCORE_"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(ENV_PREFIX + key, default)


class ScenarioConfig(BaseModel):
    skip_scenario_id: str = "skip"
    end_scenario_id: str = "end"
    default_scenario_id: str = "default"

    @field_validator("skip_scenario_id", "end_scenario_id", "default_scenario_id")
    @classmethod
    def ids_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("scenario ids must be non-empty strings")
        return v.strip()

    @model_validator(mode="after")
    def reserved_ids_must_differ(self) -> "ScenarioConfig":
        if self.skip_scenario_id == self.end_scenario_id:
            raise ValueError("skip_scenario_id and end_scenario_id must differ")
        if self.default_scenario_id in {self.skip_scenario_id, self.end_scenario_id}:
            raise ValueError("default_scenario_id must not be a reserved hiding scenario")
        return self


class ValidationConfig(BaseModel):
    enforce_numeric_bound: bool = Field(default=True)
    numeric_bound_inclusive: bool = Field(default=True)
    default_rating_scale: int = Field(default=5, gt=0)
    # Typical UI input limits are 256 / 2500; unset means "only when max_length is set"
    default_short_text_max_length: Optional[int] = Field(default=None, gt=0)
    default_long_text_max_length: Optional[int] = Field(default=None, gt=0)


class CoreConfig(BaseModel):
    scenarios: ScenarioConfig = Field(default_factory=ScenarioConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:  # pragma: no cover - defensive
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _as_bool(text: Optional[str]) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


def _as_optional_int(text: Optional[str]) -> Optional[int]:
    if text is None or str(text).strip().lower() in {"", "none", "null"}:
        return None
    return int(str(text).strip())


def load_config() -> CoreConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables (SURVEYCORE_*)
    2) Text files in `config/` (optional)
    3) surveycore_config.json at project root (primary base)
    4) Safe defaults
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    skip_id = _env("SKIP_SCENARIO_ID") or _read_config_file("scenarios.skip") or _base("scenarios.skip_scenario_id", "skip")
    end_id = _env("END_SCENARIO_ID") or _read_config_file("scenarios.end") or _base("scenarios.end_scenario_id", "end")
    default_id = (
        _env("DEFAULT_SCENARIO_ID")
        or _read_config_file("scenarios.default")
        or _base("scenarios.default_scenario_id", "default")
    )

    bound_text = (
        _env("ENFORCE_NUMERIC_BOUND")
        or _read_config_file("validation.numeric_bound")
        or _base("validation.enforce_numeric_bound", "true")
    )
    inclusive_text = (
        _env("NUMERIC_BOUND_INCLUSIVE")
        or _read_config_file("validation.numeric_bound_inclusive")
        or _base("validation.numeric_bound_inclusive", "true")
    )
    rating_text = _env("DEFAULT_RATING_SCALE") or _base("validation.default_rating_scale", "5")
    short_max_text = _env("DEFAULT_SHORT_TEXT_MAX_LENGTH") or _base("validation.default_short_text_max_length")
    long_max_text = _env("DEFAULT_LONG_TEXT_MAX_LENGTH") or _base("validation.default_long_text_max_length")

    try:
        cfg = CoreConfig(
            scenarios=ScenarioConfig(
                skip_scenario_id=skip_id,
                end_scenario_id=end_id,
                default_scenario_id=default_id,
            ),
            validation=ValidationConfig(
                enforce_numeric_bound=_as_bool(bound_text),
                numeric_bound_inclusive=_as_bool(inclusive_text),
                default_rating_scale=int(str(rating_text).strip()),
                default_short_text_max_length=_as_optional_int(short_max_text),
                default_long_text_max_length=_as_optional_int(long_max_text),
            ),
        )
        return cfg
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid surveycore configuration: %s", e)
        raise


__all__ = [
    "CoreConfig",
    "ScenarioConfig",
    "ValidationConfig",
    "load_config",
]
