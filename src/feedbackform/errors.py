"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``feedbackform.app`` maps each class to a status code.
"""

from __future__ import annotations

from typing import Any


class FeedbackError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class ValidationError(FeedbackError):
    status_code = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        reason: str = "invalid",
        errors: list[dict[str, str]] | None = None,
        **extra: Any,
    ) -> None:
        if errors is None:
            errors = [{"field": field or "", "message": message}]
        super().__init__(
            message,
            code="validation_error",
            details={"reason": reason, "errors": errors, **extra},
        )
        self.field = field or (errors[0]["field"] if errors else None)
        self.reason = reason
        self.errors = errors


class NotFoundError(FeedbackError):
    status_code = 404

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found", code="not_found")


class ForbiddenError(FeedbackError):
    status_code = 403

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message, code="forbidden")


class AuthenticationError(FeedbackError):
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="not_authenticated")
