from __future__ import annotations

import os

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from kaisan_console.application import messages
from kaisan_console.application.dtos.auth_dto import (
    ActionResponse,
    CredentialsBody,
    ForgotPasswordBody,
    LoginView,
    ResetPasswordBody,
    ResetPasswordView,
    SessionResponse,
)
from kaisan_console.application.dtos.common_dto import MessageDTO
from kaisan_console.application.use_cases.update_password import UpdatePasswordUseCase
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.errors import AuthServiceError, FormValidationError
from kaisan_console.infrastructure.api.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    get_auth_adapter,
    get_optional_session,
)
from kaisan_console.infrastructure.database.supabase_client import SupabaseAuthAdapter

HOME_ROUTE = "/prompt"

router = APIRouter(
    tags=["Authentication"],
    responses={
        400: {"description": "Bad Request - Invalid form or rejected by the auth service"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


def _store_session(response: Response, session: SessionEntity) -> None:
    secure = os.getenv("ENV", "development") not in ("development", "test")
    response.set_cookie(ACCESS_COOKIE, session.access_token, httponly=True, samesite="lax", secure=secure)
    if session.refresh_token:
        response.set_cookie(
            REFRESH_COOKIE, session.refresh_token, httponly=True, samesite="lax", secure=secure
        )


def _session_response(session: SessionEntity) -> SessionResponse:
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        redirect_to=HOME_ROUTE,
    )


@router.get(
    "/",
    response_model=LoginView,
    summary="Login Screen",
    description="""
    Entry point of the console.

    Signed-out visitors get the login screen. Signed-in users are sent to the
    system prompt page.
    """,
)
def home(session: SessionEntity | None = Depends(get_optional_session)):
    """Render the login screen or forward a signed-in user."""
    if session is not None:
        return RedirectResponse(HOME_ROUTE, status_code=status.HTTP_303_SEE_OTHER)
    return LoginView()


@router.post(
    "/auth/login",
    response_model=SessionResponse,
    summary="Sign In",
    description="Sign in with email and password. The session is also stored in HTTP-only cookies.",
)
def login(
    body: CredentialsBody,
    response: Response,
    auth: SupabaseAuthAdapter = Depends(get_auth_adapter),
):
    """Sign in with email and password."""
    session = auth.sign_in_with_password(body.email, body.password)
    _store_session(response, session)
    return _session_response(session)


@router.post(
    "/auth/signup",
    response_model=ActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create an account. A confirmation link is emailed by the auth service.",
)
def signup(body: CredentialsBody, auth: SupabaseAuthAdapter = Depends(get_auth_adapter)):
    """Register a new account."""
    auth.sign_up(body.email, body.password)
    return ActionResponse(message=MessageDTO.success(messages.SIGNUP_CHECK_EMAIL))


@router.post(
    "/auth/forgot-password",
    response_model=ActionResponse,
    summary="Request Password Reset",
    description="Email a recovery link that opens the `/reset-password` page.",
)
def forgot_password(
    body: ForgotPasswordBody,
    request: Request,
    auth: SupabaseAuthAdapter = Depends(get_auth_adapter),
):
    """Send the password recovery email."""
    email = body.email.strip()
    if not email:
        raise FormValidationError(messages.ENTER_EMAIL)
    site = os.getenv("SITE_URL") or str(request.base_url)
    auth.reset_password_for_email(email, redirect_to=f"{site.rstrip('/')}/reset-password")
    return ActionResponse(message=MessageDTO.success(messages.RESET_EMAIL_SENT), redirect_to="/")


@router.post(
    "/auth/refresh",
    response_model=SessionResponse,
    summary="Refresh Session",
    description="Exchange the refresh-token cookie for a new session.",
)
def refresh(
    request: Request,
    response: Response,
    auth: SupabaseAuthAdapter = Depends(get_auth_adapter),
):
    """Refresh the current session."""
    session = auth.refresh(request.cookies.get(REFRESH_COOKIE))
    _store_session(response, session)
    return _session_response(session)


@router.post(
    "/auth/logout",
    response_model=ActionResponse,
    summary="Sign Out",
    description="End the session, clear the session cookies and go back to the login screen.",
)
def logout(
    response: Response,
    session: SessionEntity | None = Depends(get_optional_session),
    auth: SupabaseAuthAdapter = Depends(get_auth_adapter),
):
    """Sign out the current user."""
    if session is not None:
        auth.sign_out(session)
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)
    return ActionResponse(redirect_to="/")


@router.get(
    "/reset-password",
    response_model=ResetPasswordView,
    summary="New Password Screen",
    description="Form opened from the recovery email. No session is required to open it.",
)
def reset_password_form():
    """Render the new password form."""
    return ResetPasswordView()


@router.post(
    "/reset-password",
    response_model=ResetPasswordView,
    summary="Set New Password",
    description="""
    Set a new password for the recovery session.

    **Validation:**
    - Both passwords must match
    - At least 6 characters
    """,
)
def reset_password(
    body: ResetPasswordBody,
    session: SessionEntity | None = Depends(get_optional_session),
    auth: SupabaseAuthAdapter = Depends(get_auth_adapter),
):
    """Update the password of the recovery session."""
    uc = UpdatePasswordUseCase(auth=auth)
    uc.validate(body.new_password, body.confirm_password)
    if body.access_token:
        session = auth.get_session(body.access_token, body.refresh_token)
        if session is None:
            raise AuthServiceError("Invalid recovery link")
    uc.execute(session, body.new_password, body.confirm_password)
    return ResetPasswordView(message=MessageDTO.success(messages.PASSWORD_UPDATED), redirect_to="/")
