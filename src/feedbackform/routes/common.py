from __future__ import annotations

import json
from typing import Any

from fastapi import Request

from feedbackform.errors import ValidationError
from feedbackform.forms import FormService
from feedbackform.responses import ResponseService


async def read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON", field="body")


def form_service(request: Request) -> FormService:
    return FormService(request.app.state.storage)


def response_service(request: Request) -> ResponseService:
    return ResponseService(request.app.state.storage)
