from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from kaisan_console.application.dtos.common_dto import MessageDTO


class CredentialsBody(BaseModel):
    """Email and password typed on the login screen."""
    email: str = Field(..., description="Account email", examples=["user@example.com"])
    password: str = Field(..., description="Account password")


class ForgotPasswordBody(BaseModel):
    email: str = Field("", description="Email that receives the recovery link")


class SessionResponse(BaseModel):
    """Session created by a sign-in or a refresh."""
    user_id: str = Field(..., description="Unique identifier of the authenticated user")
    email: Optional[str] = Field(None, description="Email address of the authenticated user")
    access_token: str = Field(..., description="Supabase access token")
    refresh_token: Optional[str] = Field(None, description="Supabase refresh token")
    redirect_to: str = Field("/prompt", description="Route to open next")


class ActionResponse(BaseModel):
    """Outcome of an auth action that does not render a page."""
    message: Optional[MessageDTO] = None
    redirect_to: Optional[str] = Field(None, description="Route to open next, if any")


class LoginView(BaseModel):
    route: str = "/"
    view: Literal["login", "forgot_password"] = "login"
    title: str = "Kaisan"
    subtitle: str = "Sistema de Configuração de Agente IA"


class ResetPasswordBody(BaseModel):
    """New password form reached from the recovery email.

    The recovery link delivers its tokens to the browser; they may be passed
    here when no session cookie exists yet.
    """
    new_password: str = Field("", description="New password")
    confirm_password: str = Field("", description="New password, repeated")
    access_token: Optional[str] = Field(None, description="Recovery session access token")
    refresh_token: Optional[str] = Field(None, description="Recovery session refresh token")


class ResetPasswordView(BaseModel):
    route: str = "/reset-password"
    message: Optional[MessageDTO] = None
    redirect_to: Optional[str] = None
