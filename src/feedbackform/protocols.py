from __future__ import annotations

from typing import Any, Protocol


class FormRepository(Protocol):
    def list_forms(self, owner_id: str) -> list[dict[str, Any]]: ...

    def get_form(self, form_id: str) -> dict[str, Any] | None: ...

    def get_form_by_public_id(self, public_id: str) -> dict[str, Any] | None: ...

    def create_form(self, form: dict[str, Any]) -> None: ...

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]: ...

    def add_response_ref(self, form_id: str, response_id: str) -> None: ...

    def remove_response_ref(self, form_id: str, response_id: str) -> None: ...

    def delete_form(self, form_id: str) -> None: ...


class ResponseRepository(Protocol):
    def list_responses(
        self, form_id: str, offset: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]: ...

    def count_responses(self, form_id: str) -> int: ...

    def get_response(self, response_id: str) -> dict[str, Any] | None: ...

    def create_response(self, response: dict[str, Any]) -> None: ...

    def delete_response(self, response_id: str) -> None: ...

    def delete_responses_for_form(self, form_id: str) -> int: ...


class Storage(Protocol):
    forms: FormRepository
    responses: ResponseRepository
