from __future__ import annotations

import logging

from feedbackform.config import Settings, ensure_dirs
from feedbackform.protocols import Storage
from feedbackform.repo_json import JSONStorage
from feedbackform.repo_sqlite import SQLiteStorage

logger = logging.getLogger(__name__)


def init_storage(settings: Settings) -> Storage:
    ensure_dirs(settings)
    if settings.storage_backend == "sqlite":
        logger.info("Using SQLite storage at %s", settings.sqlite_path)
        return SQLiteStorage(settings.sqlite_path)
    if settings.storage_backend != "json":
        raise ValueError(f"unknown STORAGE_BACKEND: {settings.storage_backend}")
    logger.info("Using JSON document storage at %s", settings.json_path)
    return JSONStorage(settings.json_path)
