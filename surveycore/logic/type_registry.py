"""Table-driven canonicalization of raw question-type labels.

Survey authors and older clients send localized, free-form type labels
("Văn bản ngắn", "Danh sách (nút chọn)", "short_text", ...). They are matched
case-insensitively after trimming against a synonym table and mapped to a
`QuestionKind`. No fuzzy or partial matching is attempted: an unmatched label
falls back to `SINGLE_CHOICE` when the question carries options and to
`DEFAULT_SHORT_ANSWER` otherwise.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Tuple
import logging
import unicodedata

from surveycore.models.question_kind import (
    AnswerField,
    KindSpec,
    QuestionKind,
    RULE_FILE,
    RULE_FORMAT,
    RULE_LENGTH,
    RULE_NUMERIC,
    RULE_RATING_RANGE,
    RULE_REQUIRED,
    SelectionShape,
)

logger = logging.getLogger(__name__)


SYNONYMS: Mapping[QuestionKind, Tuple[str, ...]] = {
    QuestionKind.SHORT_TEXT: ("text", "văn bản ngắn", "short_text"),
    QuestionKind.LONG_TEXT: ("văn bản dài", "long_text", "textarea", "paragraph"),
    QuestionKind.SINGLE_CHOICE: (
        "single_choice",
        "danh sách (nút chọn)",
        "danh sách có nhận xét (radio)",
        "giới tính",
        "có/không",
    ),
    QuestionKind.SINGLE_CHOICE_IMAGE: ("chọn hình ảnh từ danh sách (radio)", "single_image", "single_choice_image"),
    QuestionKind.MULTI_CHOICE: ("multiple_choice", "multi_choice", "nhiều lựa chọn"),
    QuestionKind.MULTI_CHOICE_IMAGE: ("chọn nhiều hình ảnh", "multiple_image", "multi_choice_image"),
    QuestionKind.RATING: ("lựa chọn 5 điểm", "five_point", "rating"),
    QuestionKind.MATRIX: ("ma trận (chọn điểm)", "matrix"),
    QuestionKind.NUMBER: ("number", "số"),
    QuestionKind.EMAIL: ("email", "thư điện tử"),
    QuestionKind.PHONE: ("phone", "số điện thoại", "telephone"),
    QuestionKind.URL: ("url", "liên kết"),
    QuestionKind.DATE: ("date", "ngày tháng", "ngày"),
    QuestionKind.TIME: ("time", "giờ", "thời gian"),
    QuestionKind.DATE_TIME: ("datetime", "date_time", "ngày giờ"),
    QuestionKind.FILE: ("file", "tải file", "tải lên tệp", "upload"),
    QuestionKind.DEFAULT_SHORT_ANSWER: ("default_short_answer",),
}


_TEXT_CHAIN = (RULE_REQUIRED, RULE_LENGTH)
_FORMAT_CHAIN = (RULE_REQUIRED, RULE_LENGTH, RULE_FORMAT)


def _text(kind: QuestionKind, validators: Tuple[str, ...] = _TEXT_CHAIN) -> KindSpec:
    return KindSpec(kind=kind, answer_field=AnswerField.TEXT, validators=validators)


def _selection(kind: QuestionKind, shape: SelectionShape, requires_options: bool = True) -> KindSpec:
    return KindSpec(
        kind=kind,
        answer_field=AnswerField.SELECTION,
        selection_shape=shape,
        requires_options=requires_options,
        validators=(RULE_REQUIRED,),
    )


KIND_SPECS: Mapping[QuestionKind, KindSpec] = {
    QuestionKind.SHORT_TEXT: _text(QuestionKind.SHORT_TEXT),
    QuestionKind.LONG_TEXT: _text(QuestionKind.LONG_TEXT),
    QuestionKind.DEFAULT_SHORT_ANSWER: _text(QuestionKind.DEFAULT_SHORT_ANSWER),
    QuestionKind.SINGLE_CHOICE: _selection(QuestionKind.SINGLE_CHOICE, SelectionShape.SCALAR),
    QuestionKind.SINGLE_CHOICE_IMAGE: _selection(QuestionKind.SINGLE_CHOICE_IMAGE, SelectionShape.SCALAR),
    QuestionKind.MULTI_CHOICE: _selection(QuestionKind.MULTI_CHOICE, SelectionShape.ARRAY),
    QuestionKind.MULTI_CHOICE_IMAGE: _selection(QuestionKind.MULTI_CHOICE_IMAGE, SelectionShape.ARRAY),
    QuestionKind.MATRIX: _selection(QuestionKind.MATRIX, SelectionShape.SCALAR),
    # Rating holds either an option id or the chosen point ("1".."n") when no options exist
    QuestionKind.RATING: KindSpec(
        kind=QuestionKind.RATING,
        answer_field=AnswerField.SELECTION,
        selection_shape=SelectionShape.SCALAR,
        requires_options=False,
        validators=(RULE_REQUIRED, RULE_RATING_RANGE),
    ),
    QuestionKind.NUMBER: _text(QuestionKind.NUMBER, (RULE_REQUIRED, RULE_NUMERIC)),
    QuestionKind.EMAIL: _text(QuestionKind.EMAIL, _FORMAT_CHAIN),
    QuestionKind.PHONE: _text(QuestionKind.PHONE, _FORMAT_CHAIN),
    QuestionKind.URL: _text(QuestionKind.URL, _FORMAT_CHAIN),
    QuestionKind.DATE: _text(QuestionKind.DATE, _FORMAT_CHAIN),
    QuestionKind.TIME: _text(QuestionKind.TIME, _FORMAT_CHAIN),
    QuestionKind.DATE_TIME: _text(QuestionKind.DATE_TIME, _FORMAT_CHAIN),
    QuestionKind.FILE: _text(QuestionKind.FILE, (RULE_REQUIRED, RULE_FILE)),
}


def _normalize_label(raw: object) -> str:
    if raw is None:
        return ""
    return unicodedata.normalize("NFC", str(raw)).strip().lower()


class TypeRegistry:
    """Synonym table plus per-kind answer-shape declarations.

    The default instance covers the labels used by the survey editor;
    `register_synonym` lets embedding code add more without touching the
    dispatch sites.
    """

    def __init__(
        self,
        synonyms: Optional[Mapping[QuestionKind, Iterable[str]]] = None,
        specs: Optional[Mapping[QuestionKind, KindSpec]] = None,
    ) -> None:
        self._specs: Dict[QuestionKind, KindSpec] = dict(specs or KIND_SPECS)
        self._lookup: Dict[str, QuestionKind] = {}
        for kind, labels in (synonyms or SYNONYMS).items():
            # A kind's own value is always one of its synonyms
            self.register_synonym(kind, kind.value)
            for label in labels:
                self.register_synonym(kind, label)

    def register_synonym(self, kind: QuestionKind, label: str) -> None:
        key = _normalize_label(label)
        if not key:
            raise ValueError("synonym label must be non-empty")
        existing = self._lookup.get(key)
        if existing is not None and existing is not kind:
            raise ValueError(f"synonym {label!r} already registered for {existing.value}")
        self._lookup[key] = kind

    def lookup(self, raw_type: object) -> Optional[QuestionKind]:
        """Exact synonym match or None; no fallback policy applied."""
        if isinstance(raw_type, QuestionKind):
            return raw_type
        return self._lookup.get(_normalize_label(raw_type))

    def canonicalize(self, raw_type: object, has_options: bool = False) -> QuestionKind:
        kind = self.lookup(raw_type)
        if kind is not None:
            return kind
        fallback = QuestionKind.SINGLE_CHOICE if has_options else QuestionKind.DEFAULT_SHORT_ANSWER
        logger.info("type_fallback raw_type=%r has_options=%s kind=%s", raw_type, has_options, fallback.value)
        return fallback

    def resolve_kind(self, raw_type: object, has_options: bool) -> QuestionKind:
        """Canonicalize, then apply option-dependent degradations.

        A matrix without options is answered as free long text.
        """
        kind = self.canonicalize(raw_type, has_options=has_options)
        if kind is QuestionKind.MATRIX and not has_options:
            return QuestionKind.LONG_TEXT
        return kind

    def spec(self, kind: QuestionKind) -> KindSpec:
        return self._specs[kind]

    def synonyms_for(self, kind: QuestionKind) -> Tuple[str, ...]:
        return tuple(label for label, k in self._lookup.items() if k is kind)


DEFAULT_REGISTRY = TypeRegistry()


def canonicalize(raw_type: object, has_options: bool = False) -> QuestionKind:
    return DEFAULT_REGISTRY.canonicalize(raw_type, has_options=has_options)


def kind_spec(kind: QuestionKind) -> KindSpec:
    return DEFAULT_REGISTRY.spec(kind)


__all__ = [
    "SYNONYMS",
    "KIND_SPECS",
    "TypeRegistry",
    "DEFAULT_REGISTRY",
    "canonicalize",
    "kind_spec",
]
