from __future__ import annotations

import os
from pathlib import Path

QUESTION_TYPES = {"text", "multiple-choice"}
MIN_QUESTIONS = 3
MAX_QUESTIONS = 5
MIN_OPTIONS = 2


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def parse_auth_tokens(raw: str) -> dict[str, str]:
    """`token:owner` をカンマ区切りで並べた値を辞書にする。"""
    tokens: dict[str, str] = {}
    for item in raw.split(","):
        token, sep, owner = item.strip().partition(":")
        if sep and token and owner:
            tokens[token.strip()] = owner.strip()
    return tokens


class Settings:
    def __init__(self) -> None:
        self.storage_backend = os.getenv("STORAGE_BACKEND", "json").lower()
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/app.db"))
        self.json_path = Path(os.getenv("JSON_PATH", "./data/jsonstore.json"))
        self.auth_mode = os.getenv("AUTH_MODE", "token").lower()
        self.auth_tokens = parse_auth_tokens(os.getenv("AUTH_TOKENS", ""))
        self.default_owner = os.getenv("DEFAULT_OWNER", "local")
        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]
        self.max_page_limit = max(1, _int_env("MAX_PAGE_LIMIT", 100))
        self.default_page_limit = min(
            max(1, _int_env("DEFAULT_PAGE_LIMIT", 20)), self.max_page_limit
        )
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = _int_env("PORT", 8000)


def ensure_dirs(settings: Settings) -> None:
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
