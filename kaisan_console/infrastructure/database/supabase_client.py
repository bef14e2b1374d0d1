from __future__ import annotations

import logging
import os
import secrets
import uuid
from dataclasses import dataclass

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from kaisan_console.domain.entities.session import AuthEvent, SessionEntity
from kaisan_console.domain.errors import AuthServiceError
from kaisan_console.domain.services.session_events import SessionEvents

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserInfo:
    id: str
    email: str | None


# in-memory auth used when SUPABASE_DISABLED=1
_MEM_USERS: dict[str, dict] = {}  # email -> {"id", "email", "password"}
_MEM_TOKENS: dict[str, UserInfo] = {}  # access token -> user
_MEM_REFRESH: dict[str, UserInfo] = {}  # refresh token -> user
_MEM_REVOKED: set[str] = set()
_MEM_RESET_REQUESTS: list[dict] = []


def reset_memory_auth() -> None:
    _MEM_USERS.clear()
    _MEM_TOKENS.clear()
    _MEM_REFRESH.clear()
    _MEM_REVOKED.clear()
    _MEM_RESET_REQUESTS.clear()


class SupabaseAuthAdapter:
    """Wrapper around Supabase Auth and the only publisher of session events.

    Every call that acts on behalf of a user runs on a short-lived client so a
    user's session never leaks into the shared table client.
    When SUPABASE_DISABLED=1 users and tokens live in memory and unknown
    tokens resolve to a deterministic fake user.
    """

    def __init__(self, events: SessionEvents | None = None) -> None:
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.url = os.getenv("SUPABASE_URL")
        self.key = os.getenv("SUPABASE_ANON_KEY")
        self.events = events or SessionEvents()

    @property
    def _remote(self) -> bool:
        return not self.disabled and bool(self.url and self.key)

    def _auth_client(self) -> Client:
        options = ClientOptions(persist_session=False, auto_refresh_token=False)
        return create_client(self.url, self.key, options=options)

    def _user_client(self, session: SessionEntity) -> Client:
        if not session.refresh_token:
            raise AuthServiceError("Auth session missing!")
        client = self._auth_client()
        client.auth.set_session(session.access_token, session.refresh_token)
        return client

    @staticmethod
    def _to_session(auth_session) -> SessionEntity:
        user = auth_session.user
        return SessionEntity(
            user_id=user.id,
            email=user.email,
            access_token=auth_session.access_token,
            refresh_token=auth_session.refresh_token,
        )

    def _issue_mem_session(self, user: UserInfo) -> SessionEntity:
        access = secrets.token_urlsafe(24)
        refresh = secrets.token_urlsafe(24)
        _MEM_TOKENS[access] = user
        _MEM_REFRESH[refresh] = user
        return SessionEntity(user_id=user.id, email=user.email, access_token=access, refresh_token=refresh)

    def get_session(self, access_token: str | None, refresh_token: str | None = None) -> SessionEntity | None:
        """Resolve a token to a session. Any failure means "no session"."""
        if not access_token:
            return None
        if not self._remote:
            if access_token in _MEM_REVOKED:
                return None
            user = _MEM_TOKENS.get(access_token)
            if user is None:
                fake_id = str(uuid.uuid5(uuid.NAMESPACE_URL, f"kaisan:{access_token}"))
                user = UserInfo(id=fake_id, email=None)
            return SessionEntity(user.id, user.email, access_token, refresh_token)
        try:  # pragma: no cover - network
            res = self._auth_client().auth.get_user(access_token)
            user = res.user if res else None
        except Exception as exc:  # pragma: no cover - network
            logger.info("Session lookup failed: %s", exc)
            return None
        if not user:  # pragma: no cover - network
            return None
        return SessionEntity(user.id, user.email, access_token, refresh_token)  # pragma: no cover

    def sign_in_with_password(self, email: str, password: str) -> SessionEntity:
        if not self._remote:
            record = _MEM_USERS.get(email.strip().lower())
            if record is None or record["password"] != password:
                raise AuthServiceError("Invalid login credentials")
            session = self._issue_mem_session(UserInfo(id=record["id"], email=record["email"]))
        else:
            try:  # pragma: no cover - network
                res = self._auth_client().auth.sign_in_with_password(
                    {"email": email, "password": password}
                )
            except Exception as exc:  # pragma: no cover - network
                raise AuthServiceError(str(exc)) from exc
            session = self._to_session(res.session)  # pragma: no cover
        self.events.publish(AuthEvent.SIGNED_IN, session)
        return session

    def sign_up(self, email: str, password: str) -> UserInfo:
        if not self._remote:
            key = email.strip().lower()
            if not key or "@" not in key:
                raise AuthServiceError("Unable to validate email address: invalid format")
            if len(password) < 6:
                raise AuthServiceError("Password should be at least 6 characters.")
            if key in _MEM_USERS:
                raise AuthServiceError("User already registered")
            _MEM_USERS[key] = {"id": str(uuid.uuid4()), "email": key, "password": password}
            return UserInfo(id=_MEM_USERS[key]["id"], email=key)
        try:  # pragma: no cover - network
            res = self._auth_client().auth.sign_up({"email": email, "password": password})
        except Exception as exc:  # pragma: no cover - network
            raise AuthServiceError(str(exc)) from exc
        return UserInfo(id=res.user.id, email=res.user.email)  # pragma: no cover

    def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        if not self._remote:
            _MEM_RESET_REQUESTS.append({"email": email, "redirect_to": redirect_to})
            return
        try:  # pragma: no cover - network
            self._auth_client().auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        except Exception as exc:  # pragma: no cover - network
            raise AuthServiceError(str(exc)) from exc

    def update_password(self, session: SessionEntity, password: str) -> None:
        if not self._remote:
            user = _MEM_TOKENS.get(session.access_token)
            if user is None or session.access_token in _MEM_REVOKED:
                raise AuthServiceError("Auth session missing!")
            _MEM_USERS[user.email]["password"] = password
        else:
            try:  # pragma: no cover - network
                self._user_client(session).auth.update_user({"password": password})
            except AuthServiceError:  # pragma: no cover
                raise
            except Exception as exc:  # pragma: no cover - network
                raise AuthServiceError(str(exc)) from exc
        self.events.publish(AuthEvent.USER_UPDATED, session)

    def refresh(self, refresh_token: str | None) -> SessionEntity:
        if not refresh_token:
            raise AuthServiceError("Auth session missing!")
        if not self._remote:
            user = _MEM_REFRESH.pop(refresh_token, None)
            if user is None:
                raise AuthServiceError("Invalid Refresh Token: Refresh Token Not Found")
            session = self._issue_mem_session(user)
        else:
            try:  # pragma: no cover - network
                res = self._auth_client().auth.refresh_session(refresh_token)
            except Exception as exc:  # pragma: no cover - network
                raise AuthServiceError(str(exc)) from exc
            session = self._to_session(res.session)  # pragma: no cover
        self.events.publish(AuthEvent.TOKEN_REFRESHED, session)
        return session

    def sign_out(self, session: SessionEntity) -> None:
        if not self._remote:
            _MEM_REVOKED.add(session.access_token)
            _MEM_TOKENS.pop(session.access_token, None)
            if session.refresh_token:
                _MEM_REFRESH.pop(session.refresh_token, None)
        elif session.refresh_token:
            try:  # pragma: no cover - network
                self._user_client(session).auth.sign_out()
            except Exception as exc:  # pragma: no cover - network
                # the local session is dropped regardless
                logger.warning("Remote sign-out failed for %s: %s", session.user_id, exc)
        self.events.publish(AuthEvent.SIGNED_OUT, session)


# Simple reusable singleton client getter for repositories
_CLIENT_SINGLETON: Client | None = None


def get_supabase_client() -> Client | None:
    global _CLIENT_SINGLETON
    disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if disabled or not url or not key:
        return None
    if _CLIENT_SINGLETON is None:
        _CLIENT_SINGLETON = create_client(url, key)
    return _CLIENT_SINGLETON
