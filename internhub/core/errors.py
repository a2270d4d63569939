"""
Error taxonomy and FastAPI exception handlers.

Every failure a user can see is a MarketplaceError carrying a short title
and a human-readable detail. The handlers below render them as

    {"title": "...", "detail": "..."}

so clients can show them as dismissible notifications.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/auth"


class MarketplaceError(Exception):
    """Base class for all user-facing errors."""

    status_code: int = 500
    title: str = "Error"

    def __init__(self, detail: str, title: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if title:
            self.title = title

    def to_content(self) -> dict:
        return {"title": self.title, "detail": self.detail}


class AuthenticationRequired(MarketplaceError):
    """No session. Callers are sent to the sign-in flow."""

    status_code = 401
    title = "Authentication required"

    def to_content(self) -> dict:
        content = super().to_content()
        content["redirect_to"] = SIGN_IN_PATH
        return content


class AuthorizationDenied(MarketplaceError):
    status_code = 403
    title = "Permission denied"


class NotFound(MarketplaceError):
    status_code = 404
    title = "Not found"


class ValidationFailed(MarketplaceError):
    status_code = 400
    title = "Invalid input"


class AlreadyApplied(ValidationFailed):
    status_code = 409
    title = "Already applied"


class StoreError(MarketplaceError):
    """The entity store, blob store, auth provider or listing provider failed."""

    status_code = 503
    title = "Service unavailable"


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationRequired) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_content(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "invalid value"))
    return JSONResponse(
        status_code=422,
        content={"title": ValidationFailed.title, "detail": "; ".join(messages)}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
