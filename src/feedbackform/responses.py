from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from feedbackform.errors import ForbiddenError, NotFoundError, ValidationError
from feedbackform.forms import FormService
from feedbackform.protocols import Storage
from feedbackform.questions import SUBMISSION_SCHEMA, validate_shape
from feedbackform.summary import render_csv, summarize
from feedbackform.utils import new_ulid, now_utc
from feedbackform.validator import decode_submission, validate_submission

logger = logging.getLogger(__name__)


@dataclass
class Page:
    page: int
    limit: int
    total: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentPage": self.page,
            "totalPages": math.ceil(self.total / self.limit),
            "totalResponses": self.total,
            "hasNext": self.page * self.limit < self.total,
            "hasPrev": self.page > 1,
        }


def parse_page_params(
    page: Any, limit: Any, default_limit: int, max_limit: int
) -> tuple[int, int]:
    def as_int(value: Any, field: str, default: int) -> int:
        if value in (None, ""):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be an integer", field=field)

    page_value = as_int(page, "page", 1)
    limit_value = as_int(limit, "limit", default_limit)
    if page_value < 1:
        raise ValidationError("page must be 1 or greater", field="page")
    if not 1 <= limit_value <= max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}", field="limit")
    return page_value, limit_value


class ResponseService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._forms = FormService(storage)

    def submit(
        self,
        public_id: str,
        payload: Any,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> dict[str, Any]:
        validate_shape(SUBMISSION_SCHEMA, payload)
        form = self._forms.get_public(public_id)
        answers = validate_submission(form, decode_submission(payload["answers"]))

        response = {
            "id": new_ulid(),
            "form_id": form["id"],
            "answers": answers,
            "submitted_at": now_utc(),
            "ip_address": ip_address,
            "user_agent": user_agent,
        }
        self._storage.responses.create_response(response)
        try:
            self._storage.forms.add_response_ref(form["id"], response["id"])
        except Exception:
            # 2回目の書き込みに失敗すると、フォームから参照されない回答が残る
            logger.warning(
                "Response %s stored but not linked to form %s", response["id"], form["id"]
            )
            raise
        logger.info("Response %s submitted to form %s", response["id"], form["id"])
        return response

    def list_page(
        self, owner_id: str, form_id: str, page: int, limit: int
    ) -> tuple[list[dict[str, Any]], Page, dict[str, dict[str, Any]]]:
        form = self._forms.get_owned(owner_id, form_id)
        total = self._storage.responses.count_responses(form["id"])
        paging = Page(page=page, limit=limit, total=total)
        items = self._storage.responses.list_responses(
            form["id"], offset=paging.offset, limit=limit
        )
        summary = summarize(form, self._storage.responses.list_responses(form["id"]))
        return items, paging, summary

    def export_csv(self, owner_id: str, form_id: str) -> tuple[dict[str, Any], str]:
        form = self._forms.get_owned(owner_id, form_id)
        responses = self._storage.responses.list_responses(form["id"])
        return form, render_csv(responses)

    def delete(self, owner_id: str, response_id: str) -> None:
        response = self._storage.responses.get_response(response_id)
        if not response:
            raise NotFoundError("Response")
        form = self._storage.forms.get_form(response["form_id"])
        if not form or form["owner_id"] != owner_id:
            raise ForbiddenError()

        self._storage.responses.delete_response(response_id)
        self._storage.forms.remove_response_ref(form["id"], response_id)
        logger.info("Response %s deleted from form %s", response_id, form["id"])
