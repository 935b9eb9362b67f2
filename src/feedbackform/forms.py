from __future__ import annotations

import logging
from typing import Any

from feedbackform.errors import NotFoundError
from feedbackform.protocols import Storage
from feedbackform.questions import (
    FORM_CREATE_SCHEMA,
    FORM_UPDATE_SCHEMA,
    normalize_questions,
    normalize_title,
    validate_shape,
)
from feedbackform.utils import new_public_id, new_ulid, now_utc

logger = logging.getLogger(__name__)

PUBLIC_ID_ATTEMPTS = 5


class FormService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def create(self, owner_id: str, payload: Any) -> dict[str, Any]:
        validate_shape(FORM_CREATE_SCHEMA, payload)
        title = normalize_title(payload.get("title"))
        questions = normalize_questions(payload["questions"])
        now = now_utc()
        form = {
            "id": new_ulid(),
            "public_id": self._unused_public_id(),
            "owner_id": owner_id,
            "title": title,
            "description": str(payload.get("description") or "").strip(),
            "questions": questions,
            "is_active": bool(payload.get("isActive", True)),
            "response_ids": [],
            "created_at": now,
            "updated_at": now,
        }
        self._storage.forms.create_form(form)
        logger.info("Form %s created by %s", form["id"], owner_id)
        return self._storage.forms.get_form(form["id"]) or form

    def list(self, owner_id: str) -> list[tuple[dict[str, Any], int]]:
        forms = self._storage.forms.list_forms(owner_id)
        return [(form, self._storage.responses.count_responses(form["id"])) for form in forms]

    def get(self, owner_id: str, form_id: str) -> tuple[dict[str, Any], int]:
        form = self.get_owned(owner_id, form_id)
        return form, self._storage.responses.count_responses(form["id"])

    def get_owned(self, owner_id: str, form_id: str) -> dict[str, Any]:
        form = self._storage.forms.get_form(form_id)
        # 他人のフォームも「存在しない」として扱う
        if not form or form["owner_id"] != owner_id:
            raise NotFoundError("Form")
        return form

    def get_public(self, public_id: str) -> dict[str, Any]:
        form = self._storage.forms.get_form_by_public_id(public_id)
        if not form or not form.get("is_active"):
            raise NotFoundError("Form")
        return form

    def update(self, owner_id: str, form_id: str, payload: Any) -> dict[str, Any]:
        validate_shape(FORM_UPDATE_SCHEMA, payload)
        form = self.get_owned(owner_id, form_id)

        updates: dict[str, Any] = {}
        if "title" in payload:
            updates["title"] = normalize_title(payload["title"])
        if "description" in payload:
            updates["description"] = str(payload.get("description") or "").strip()
        if "questions" in payload:
            updates["questions"] = normalize_questions(
                payload["questions"], existing=form.get("questions", [])
            )
        if "isActive" in payload:
            updates["is_active"] = bool(payload["isActive"])
        updates["updated_at"] = now_utc()

        try:
            updated = self._storage.forms.update_form(form_id, updates)
        except KeyError:
            raise NotFoundError("Form")
        logger.info("Form %s updated (%s)", form_id, ", ".join(sorted(updates)))
        return updated

    def delete(self, owner_id: str, form_id: str) -> int:
        form = self.get_owned(owner_id, form_id)
        # 子(回答)を先に消してから親(フォーム)を消す
        removed = self._storage.responses.delete_responses_for_form(form["id"])
        self._storage.forms.delete_form(form["id"])
        logger.info("Form %s deleted with %d responses", form["id"], removed)
        return removed

    def _unused_public_id(self) -> str:
        for _ in range(PUBLIC_ID_ATTEMPTS):
            candidate = new_public_id()
            if self._storage.forms.get_form_by_public_id(candidate) is None:
                return candidate
        raise RuntimeError("Failed to generate a unique public identifier")
