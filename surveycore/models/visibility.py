"""Visibility-related reusable types."""

from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class QuestionState(BaseModel):
    question_id: str
    visible: bool
    active_scenario_id: str
    # Index into the question's conditions of the first match; None when the default applied
    matched_condition_index: Optional[int] = None
    branching_enabled: bool = True


class ScenarioChange(BaseModel):
    question_id: str
    previous: Optional[str] = None
    current: str


class VisibilityDelta(BaseModel):
    now_visible: List[str] = Field(default_factory=list)
    now_hidden: List[str] = Field(default_factory=list)
    suppressed_answers: List[str] = Field(default_factory=list)
    scenario_changes: List[ScenarioChange] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.now_visible or self.now_hidden or self.scenario_changes)


class ConditionDescription(BaseModel):
    condition_index: int
    source_question_id: str
    # 1-based position of the source question in the survey
    source_position: int
    operator: str
    option_ids: List[str] = Field(default_factory=list)
    option_texts: List[str] = Field(default_factory=list)
    target_scenario_id: str
    summary: str


class ConditionInfo(BaseModel):
    question_id: str
    is_conditional: bool
    triggering_question_ids: List[str] = Field(default_factory=list)
    resolved_scenario_id: str
    matched_condition_index: Optional[int] = None
    configuration_error: Optional[str] = None
    descriptions: List[ConditionDescription] = Field(default_factory=list)


VisibilityMap = Dict[str, QuestionState]


__all__ = [
    "QuestionState",
    "ScenarioChange",
    "VisibilityDelta",
    "ConditionDescription",
    "ConditionInfo",
    "VisibilityMap",
]
