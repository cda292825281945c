"""Functional tests for raw type-label canonicalization.

Covers exact synonym matching (case/whitespace-insensitive), idempotence of
canonicalization, the option-dependent fallback policy, and the answer shape
each kind declares.
"""

from __future__ import annotations

import pytest

from surveycore.logic.type_registry import DEFAULT_REGISTRY, SYNONYMS, TypeRegistry, canonicalize, kind_spec
from surveycore.models.question_kind import AnswerField, QuestionKind, SelectionShape


@pytest.mark.parametrize(
    "label, expected",
    [
        ("text", QuestionKind.SHORT_TEXT),
        ("  Văn bản ngắn ", QuestionKind.SHORT_TEXT),
        ("SHORT_TEXT", QuestionKind.SHORT_TEXT),
        ("Văn bản dài", QuestionKind.LONG_TEXT),
        ("Danh sách (nút chọn)", QuestionKind.SINGLE_CHOICE),
        ("Có/Không", QuestionKind.SINGLE_CHOICE),
        ("Giới tính", QuestionKind.SINGLE_CHOICE),
        ("Chọn hình ảnh từ danh sách (Radio)", QuestionKind.SINGLE_CHOICE_IMAGE),
        ("Nhiều lựa chọn", QuestionKind.MULTI_CHOICE),
        ("Chọn nhiều hình ảnh", QuestionKind.MULTI_CHOICE_IMAGE),
        ("Lựa chọn 5 điểm", QuestionKind.RATING),
        ("Ma trận (chọn điểm)", QuestionKind.MATRIX),
        ("Số", QuestionKind.NUMBER),
        ("Số điện thoại", QuestionKind.PHONE),
        ("Thư điện tử", QuestionKind.EMAIL),
        ("Liên kết", QuestionKind.URL),
        ("Ngày", QuestionKind.DATE),
        ("Giờ", QuestionKind.TIME),
        ("Ngày giờ", QuestionKind.DATE_TIME),
        ("Tải lên tệp", QuestionKind.FILE),
    ],
)
def test_known_labels_canonicalize(label: str, expected: QuestionKind) -> None:
    assert canonicalize(label) is expected


@pytest.mark.parametrize("kind", list(QuestionKind))
def test_canonicalize_is_idempotent_for_every_kind(kind: QuestionKind) -> None:
    once = canonicalize(kind.value)
    assert once is kind
    assert canonicalize(once.value) is once
    assert canonicalize(f"  {kind.value.upper()}\t") is kind
    for synonym in DEFAULT_REGISTRY.synonyms_for(kind):
        assert canonicalize(synonym) is kind
        assert canonicalize(synonym.upper()) is kind


def test_unmatched_label_falls_back_by_option_presence() -> None:
    assert canonicalize("câu hỏi lạ") is QuestionKind.DEFAULT_SHORT_ANSWER
    assert canonicalize("câu hỏi lạ", has_options=True) is QuestionKind.SINGLE_CHOICE
    assert canonicalize(None) is QuestionKind.DEFAULT_SHORT_ANSWER


def test_no_partial_matching() -> None:
    # "short" is a prefix of a synonym, not a synonym
    assert canonicalize("short") is QuestionKind.DEFAULT_SHORT_ANSWER
    assert canonicalize("multiple_choice_extra", has_options=True) is QuestionKind.SINGLE_CHOICE


def test_matrix_without_options_is_answered_as_long_text() -> None:
    assert DEFAULT_REGISTRY.resolve_kind("matrix", has_options=False) is QuestionKind.LONG_TEXT
    assert DEFAULT_REGISTRY.resolve_kind("matrix", has_options=True) is QuestionKind.MATRIX


def test_kind_specs_declare_answer_shapes() -> None:
    assert kind_spec(QuestionKind.MULTI_CHOICE).selection_shape is SelectionShape.ARRAY
    assert kind_spec(QuestionKind.MULTI_CHOICE_IMAGE).is_multi
    assert kind_spec(QuestionKind.SINGLE_CHOICE).selection_shape is SelectionShape.SCALAR
    assert kind_spec(QuestionKind.SINGLE_CHOICE).requires_options
    assert kind_spec(QuestionKind.NUMBER).answer_field is AnswerField.TEXT
    assert kind_spec(QuestionKind.FILE).is_text
    assert not kind_spec(QuestionKind.RATING).requires_options
    assert set(SYNONYMS.keys()) == set(QuestionKind)


def test_register_synonym_extends_lookup_and_rejects_conflicts() -> None:
    registry = TypeRegistry()
    registry.register_synonym(QuestionKind.LONG_TEXT, "Ghi chú")
    assert registry.canonicalize("ghi chú") is QuestionKind.LONG_TEXT
    # The default registry is untouched
    assert canonicalize("ghi chú") is QuestionKind.DEFAULT_SHORT_ANSWER
    with pytest.raises(ValueError):
        registry.register_synonym(QuestionKind.NUMBER, "text")
