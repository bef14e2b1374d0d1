from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


@dataclass(frozen=True, slots=True)
class SessionEntity:
    user_id: str
    email: str | None
    access_token: str
    refresh_token: str | None = None
