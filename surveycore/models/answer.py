"""Answer record held per question by the answer store.

A record may carry a stale field from before its question's kind changed
(text left on a question that is now a selection, or the reverse). Reads that
decide "answered" or build the hand-off payload take the kind's `KindSpec`
and look only at the field it declares.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

from surveycore.models.question_kind import KindSpec


Selection = Union[str, List[str]]


class Answer(BaseModel):
    question_id: str
    text: Optional[str] = None
    selection: Optional[Selection] = None
    # Recorded by file inputs only
    file_size_kb: Optional[float] = None

    def field_view(self, spec: Optional[KindSpec]) -> Answer:
        """Copy holding only the field `spec` declares; unchanged when `spec` is None."""
        if spec is None:
            return self
        if spec.is_selection:
            return self.model_copy(update={"text": None, "file_size_kb": None})
        return self.model_copy(update={"selection": None})

    def is_empty(self, spec: Optional[KindSpec] = None) -> bool:
        """True when the declared field (or, without a spec, every field) is blank."""
        view = self.field_view(spec)
        if view.text is not None and view.text.strip() != "":
            return False
        if isinstance(view.selection, list):
            return len(view.selection) == 0
        return view.selection is None or str(view.selection) == ""

    def selected_ids(self) -> List[str]:
        if self.selection is None:
            return []
        if isinstance(self.selection, list):
            return [str(s) for s in self.selection]
        return [str(self.selection)]

    def to_payload(self, spec: Optional[KindSpec] = None) -> Dict[str, Any]:
        """Serializable hand-off shape: question_id plus exactly one field.

        With a spec the field is the declared one; otherwise whichever is populated.
        """
        if spec is not None:
            use_selection = spec.is_selection
        else:
            use_selection = self.selection is not None
        if use_selection:
            value: Any = list(self.selection) if isinstance(self.selection, list) else self.selection
            return {"question_id": self.question_id, "selection": value}
        return {"question_id": self.question_id, "text": self.text}


__all__ = ["Answer", "Selection"]
