from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Request

from feedbackform.config import Settings
from feedbackform.errors import AuthenticationError

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    def require_owner(self, request: Request) -> str: ...


class NoAuthProvider:
    """開発用。すべての呼び出し元を固定のオーナーとして扱う。"""

    def __init__(self, owner_id: str) -> None:
        self._owner_id = owner_id

    def require_owner(self, request: Request) -> str:
        return self._owner_id


class BearerTokenAuthProvider:
    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)

    def require_owner(self, request: Request) -> str:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("No token, authorization denied")
        owner_id = self._tokens.get(token.strip())
        if owner_id is None:
            logger.info("Rejected unknown bearer token from %s", _client_host(request))
            raise AuthenticationError("Token is not valid")
        return owner_id


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "-"


def get_auth_provider(settings: Settings) -> AuthProvider:
    if settings.auth_mode == "none":
        logger.warning("AUTH_MODE=none: every request acts as %s", settings.default_owner)
        return NoAuthProvider(settings.default_owner)
    return BearerTokenAuthProvider(settings.auth_tokens)


def current_owner(request: Request) -> str:
    return request.app.state.auth_provider.require_owner(request)
