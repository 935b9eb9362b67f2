from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedbackform.auth import get_auth_provider
from feedbackform.config import Settings
from feedbackform.errors import AuthenticationError, FeedbackError
from feedbackform.protocols import Storage
from feedbackform.routes.forms import router as forms_router
from feedbackform.routes.responses import router as responses_router
from feedbackform.routes.system import router as system_router
from feedbackform.storage import init_storage

logger = logging.getLogger(__name__)


async def feedback_error_handler(request: Request, exc: FeedbackError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"detail": "Internal server error", "code": "internal_error"}, status_code=500
    )


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or Settings()
    storage = storage or init_storage(settings)

    app = FastAPI(
        title="Feedback Form API",
        openapi_tags=[
            {"name": "api/forms", "description": "REST API: forms"},
            {"name": "api/responses", "description": "REST API: responses"},
            {"name": "system", "description": "system"},
        ],
    )

    app.state.storage = storage
    app.state.settings = settings
    app.state.auth_provider = get_auth_provider(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FeedbackError, feedback_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(forms_router)
    app.include_router(responses_router)
    app.include_router(system_router)

    return app
