from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from feedbackform.models import Base, FormModel, ResponseModel
from feedbackform.utils import dumps_json, ensure_aware, loads_json


class SQLiteFormRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_forms(self, owner_id: str) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = (
                session.query(FormModel)
                .filter(FormModel.owner_id == owner_id)
                .order_by(FormModel.created_at.desc())
                .all()
            )
            return [self._to_dict(row) for row in rows]

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            return self._to_dict(row) if row else None

    def get_form_by_public_id(self, public_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = (
                session.query(FormModel)
                .filter(FormModel.public_id == public_id)
                .first()
            )
            return self._to_dict(row) if row else None

    def create_form(self, form: dict[str, Any]) -> None:
        with self._Session() as session:
            row = FormModel(
                id=form["id"],
                public_id=form["public_id"],
                owner_id=form["owner_id"],
                title=form["title"],
                description=form.get("description", ""),
                questions_json=dumps_json(form["questions"]),
                is_active=form.get("is_active", True),
                response_ids_json=dumps_json(form.get("response_ids", [])),
                created_at=form["created_at"],
                updated_at=form["updated_at"],
            )
            session.add(row)
            session.commit()

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                raise KeyError(form_id)
            for key, value in updates.items():
                if key == "questions":
                    row.questions_json = dumps_json(value)
                elif key == "response_ids":
                    row.response_ids_json = dumps_json(value)
                else:
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return self._to_dict(row)

    def add_response_ref(self, form_id: str, response_id: str) -> None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                raise KeyError(form_id)
            refs = loads_json(row.response_ids_json) or []
            refs.append(response_id)
            row.response_ids_json = dumps_json(refs)
            session.commit()

    def remove_response_ref(self, form_id: str, response_id: str) -> None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                return
            refs = loads_json(row.response_ids_json) or []
            row.response_ids_json = dumps_json([r for r in refs if r != response_id])
            session.commit()

    def delete_form(self, form_id: str) -> None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if row:
                session.delete(row)
                session.commit()

    @staticmethod
    def _to_dict(row: FormModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "public_id": row.public_id,
            "owner_id": row.owner_id,
            "title": row.title,
            "description": row.description or "",
            "questions": loads_json(row.questions_json) or [],
            "is_active": bool(row.is_active),
            "response_ids": loads_json(row.response_ids_json) or [],
            "created_at": ensure_aware(row.created_at),
            "updated_at": ensure_aware(row.updated_at),
        }


class SQLiteResponseRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_responses(
        self, form_id: str, offset: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        with self._Session() as session:
            query = (
                session.query(ResponseModel)
                .filter(ResponseModel.form_id == form_id)
                .order_by(ResponseModel.submitted_at.desc(), ResponseModel.id.desc())
                .offset(offset)
            )
            if limit is not None:
                query = query.limit(limit)
            return [self._to_dict(row) for row in query.all()]

    def count_responses(self, form_id: str) -> int:
        with self._Session() as session:
            return (
                session.query(ResponseModel)
                .filter(ResponseModel.form_id == form_id)
                .count()
            )

    def get_response(self, response_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(ResponseModel, response_id)
            return self._to_dict(row) if row else None

    def create_response(self, response: dict[str, Any]) -> None:
        with self._Session() as session:
            row = ResponseModel(
                id=response["id"],
                form_id=response["form_id"],
                answers_json=dumps_json(response["answers"]),
                submitted_at=response["submitted_at"],
                ip_address=response.get("ip_address"),
                user_agent=response.get("user_agent"),
            )
            session.add(row)
            session.commit()

    def delete_response(self, response_id: str) -> None:
        with self._Session() as session:
            row = session.get(ResponseModel, response_id)
            if row:
                session.delete(row)
                session.commit()

    def delete_responses_for_form(self, form_id: str) -> int:
        with self._Session() as session:
            deleted = (
                session.query(ResponseModel)
                .filter(ResponseModel.form_id == form_id)
                .delete(synchronize_session=False)
            )
            session.commit()
            return deleted

    @staticmethod
    def _to_dict(row: ResponseModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "form_id": row.form_id,
            "answers": loads_json(row.answers_json) or [],
            "submitted_at": ensure_aware(row.submitted_at),
            "ip_address": row.ip_address,
            "user_agent": row.user_agent,
        }


class SQLiteStorage:
    def __init__(self, db_path: Path) -> None:
        self._engine = create_engine(f"sqlite:///{db_path}", future=True)
        self._Session = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        self.forms = SQLiteFormRepo(self._Session)
        self.responses = SQLiteResponseRepo(self._Session)
