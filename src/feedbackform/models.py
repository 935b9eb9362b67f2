from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FormModel(Base):
    __tablename__ = "forms"

    id = Column(String, primary_key=True)
    public_id = Column(String, unique=True, index=True, nullable=False)
    owner_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text)
    questions_json = Column(Text)
    is_active = Column(Boolean, default=True)
    response_ids_json = Column(Text)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class ResponseModel(Base):
    __tablename__ = "responses"

    id = Column(String, primary_key=True)
    form_id = Column(String, index=True, nullable=False)
    answers_json = Column(Text)
    submitted_at = Column(DateTime, index=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
