"""Common DTOs for page views and error handling."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

# (route, label) of the console navigation bar, in display order
NAV_LINKS: tuple[tuple[str, str], ...] = (
    ("/whatsapp", "WhatsApp"),
    ("/prompt", "Prompt do Sistema"),
    ("/base-de-conhecimento", "Base de Conhecimento"),
    ("/reset-memory", "Resetar Memória"),
    ("/profile", "Meu Perfil"),
)


class MessageDTO(BaseModel):
    """Inline message shown above a form."""
    text: str = Field(..., description="Message text", examples=["Perfil atualizado com sucesso!"])
    type: Literal["success", "error"] = Field(..., description="Message kind")

    @classmethod
    def success(cls, text: str) -> MessageDTO:
        return cls(text=text, type="success")

    @classmethod
    def error(cls, text: str) -> MessageDTO:
        return cls(text=text, type="error")


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: str = Field(..., description="Error message describing what went wrong")
    message: MessageDTO = Field(..., description="The same error as an inline message")


class NavigationAbortedResponse(ErrorResponse):
    """Returned when a navigation is held back by unsaved changes."""
    route: str = Field(..., description="Route that stays rendered", examples=["/base-de-conhecimento"])
    target: str = Field(..., description="Route the user tried to open", examples=["/prompt"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Health status", examples=["healthy"])


class NavItem(BaseModel):
    href: str
    label: str
    active: bool = False


def navigation_items(current: str) -> list[NavItem]:
    return [NavItem(href=href, label=label, active=href == current) for href, label in NAV_LINKS]


class PageView(BaseModel):
    """Fields every authenticated console page renders."""
    route: str = Field(..., description="Route of the rendered page", examples=["/prompt"])
    email: Optional[str] = Field(None, description="Email of the signed-in user")
    nav: list[NavItem] = Field(default_factory=list, description="Navigation bar entries")
    message: Optional[MessageDTO] = Field(None, description="Message produced by the last action")


def page_context(route: str, email: str | None) -> dict:
    """Common keyword arguments for a ``PageView`` subclass."""
    return {"route": route, "email": email, "nav": navigation_items(route)}


class NavigationState(BaseModel):
    """Unsaved-changes state used to intercept a browser unload."""
    route: str = Field(..., description="Route the user last rendered")
    dirty: bool = Field(..., description="Whether unsaved changes exist")
    confirm_unload: bool = Field(..., description="Whether leaving the page must be confirmed")
