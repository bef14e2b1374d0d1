from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from kaisan_console.application import messages
from kaisan_console.application.dtos.common_dto import (
    ErrorResponse,
    MessageDTO,
    NavigationAbortedResponse,
)
from kaisan_console.domain.errors import (
    AuthServiceError,
    FormValidationError,
    StoreError,
    WebhookError,
)
from kaisan_console.domain.services.dirty_state import NavigationAborted

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/"


class LoginRequired(Exception):
    """Raised by guarded routes when the request carries no session."""


def _error(status_code: int, text: str) -> JSONResponse:
    body = ErrorResponse(detail=text, message=MessageDTO.error(text))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def _login_required(request: Request, exc: LoginRequired) -> RedirectResponse:
    return RedirectResponse(LOGIN_ROUTE, status_code=status.HTTP_303_SEE_OTHER)


async def _validation_failed(request: Request, exc: FormValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


async def _auth_failed(request: Request, exc: AuthServiceError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


async def _store_failed(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store call failed on %s %s: %s (%s)", request.method, request.url.path, exc, exc.code)
    code = status.HTTP_404_NOT_FOUND if exc.not_found else status.HTTP_502_BAD_GATEWAY
    return _error(code, str(exc))


async def _webhook_failed(request: Request, exc: WebhookError) -> JSONResponse:
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc))


async def _navigation_aborted(request: Request, exc: NavigationAborted) -> JSONResponse:
    body = NavigationAbortedResponse(
        detail=messages.UNSAVED_CHANGES,
        message=MessageDTO.error(messages.UNSAVED_CHANGES),
        route=exc.current,
        target=exc.target,
    )
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(mode="json"))


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LoginRequired, _login_required)
    app.add_exception_handler(FormValidationError, _validation_failed)
    app.add_exception_handler(AuthServiceError, _auth_failed)
    app.add_exception_handler(StoreError, _store_failed)
    app.add_exception_handler(WebhookError, _webhook_failed)
    app.add_exception_handler(NavigationAborted, _navigation_aborted)
