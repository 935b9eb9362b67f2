from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from filelock import FileLock
from tinydb import Query, TinyDB

from feedbackform.utils import now_utc, parse_dt, to_iso


class JSONRepoBase:
    def __init__(self, path: Path, lock: FileLock) -> None:
        self._path = path
        self._lock = lock

    @contextmanager
    def _db(self) -> Iterable[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            finally:
                db.close()


class JSONFormRepo(JSONRepoBase):
    def list_forms(self, owner_id: str) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("forms").search(Query().owner_id == owner_id)
        forms = [self._from_record(item) for item in items]
        return sorted(forms, key=lambda x: x["created_at"], reverse=True)

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("forms").get(Query().id == form_id)
        return self._from_record(item) if item else None

    def get_form_by_public_id(self, public_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("forms").get(Query().public_id == public_id)
        return self._from_record(item) if item else None

    def create_form(self, form: dict[str, Any]) -> None:
        record = self._to_record(form)
        with self._db() as db:
            table = db.table("forms")
            if table.contains(Query().public_id == record["public_id"]):
                raise ValueError(f"duplicate public_id: {record['public_id']}")
            table.insert(record)

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._db() as db:
            table = db.table("forms")
            item = table.get(Query().id == form_id)
            if not item:
                raise KeyError(form_id)
            item.update(self._to_record(updates, partial=True))
            table.update(item, Query().id == form_id)
        return self._from_record(item)

    def add_response_ref(self, form_id: str, response_id: str) -> None:
        with self._db() as db:
            table = db.table("forms")
            item = table.get(Query().id == form_id)
            if not item:
                raise KeyError(form_id)
            refs = list(item.get("response_ids", []))
            refs.append(response_id)
            table.update({"response_ids": refs}, Query().id == form_id)

    def remove_response_ref(self, form_id: str, response_id: str) -> None:
        with self._db() as db:
            table = db.table("forms")
            item = table.get(Query().id == form_id)
            if not item:
                return
            refs = [r for r in item.get("response_ids", []) if r != response_id]
            table.update({"response_ids": refs}, Query().id == form_id)

    def delete_form(self, form_id: str) -> None:
        with self._db() as db:
            db.table("forms").remove(Query().id == form_id)

    @staticmethod
    def _to_record(form: dict[str, Any], partial: bool = False) -> dict[str, Any]:
        record: dict[str, Any] = {}
        for key, value in form.items():
            if key in {"created_at", "updated_at"}:
                record[key] = to_iso(value) if isinstance(value, datetime) else value
            else:
                record[key] = value
        if not partial:
            record.setdefault("is_active", True)
            record.setdefault("response_ids", [])
            record.setdefault("created_at", to_iso(now_utc()))
            record.setdefault("updated_at", to_iso(now_utc()))
        return record

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "public_id": record["public_id"],
            "owner_id": record["owner_id"],
            "title": record["title"],
            "description": record.get("description", ""),
            "questions": record.get("questions", []),
            "is_active": record.get("is_active", True),
            "response_ids": record.get("response_ids", []),
            "created_at": parse_dt(record.get("created_at")),
            "updated_at": parse_dt(record.get("updated_at")),
        }


class JSONResponseRepo(JSONRepoBase):
    def list_responses(
        self, form_id: str, offset: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("responses").search(Query().form_id == form_id)
        responses = [self._from_record(item) for item in items]
        responses.sort(key=lambda x: (x["submitted_at"], x["id"]), reverse=True)
        end = None if limit is None else offset + limit
        return responses[offset:end]

    def count_responses(self, form_id: str) -> int:
        with self._db() as db:
            return db.table("responses").count(Query().form_id == form_id)

    def get_response(self, response_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("responses").get(Query().id == response_id)
        return self._from_record(item) if item else None

    def create_response(self, response: dict[str, Any]) -> None:
        record = self._to_record(response)
        with self._db() as db:
            db.table("responses").insert(record)

    def delete_response(self, response_id: str) -> None:
        with self._db() as db:
            db.table("responses").remove(Query().id == response_id)

    def delete_responses_for_form(self, form_id: str) -> int:
        with self._db() as db:
            removed = db.table("responses").remove(Query().form_id == form_id)
        return len(removed)

    @staticmethod
    def _to_record(response: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": response["id"],
            "form_id": response["form_id"],
            "answers": response["answers"],
            "submitted_at": to_iso(response["submitted_at"]),
            "ip_address": response.get("ip_address"),
            "user_agent": response.get("user_agent"),
        }

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "form_id": record["form_id"],
            "answers": record.get("answers", []),
            "submitted_at": parse_dt(record.get("submitted_at")),
            "ip_address": record.get("ip_address"),
            "user_agent": record.get("user_agent"),
        }


class JSONStorage:
    def __init__(self, path: Path) -> None:
        self._lock = FileLock(f"{path}.lock")
        self.forms = JSONFormRepo(path, self._lock)
        self.responses = JSONResponseRepo(path, self._lock)
