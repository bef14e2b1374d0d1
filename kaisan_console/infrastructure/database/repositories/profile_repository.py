from __future__ import annotations

import os
from datetime import UTC, date, datetime

from postgrest.exceptions import APIError
from supabase import Client

from kaisan_console.domain.entities.profile import ProfileEntity
from kaisan_console.domain.errors import StoreError
from kaisan_console.infrastructure.database.postgres_client import get_postgres_client
from kaisan_console.infrastructure.database.row_utils import (
    from_api_error,
    not_found,
    parse_date,
    parse_datetime,
)

# module-level in-memory store for disabled mode
_MEM_PROFILES: dict[str, dict] = {}

_UPDATABLE = ("full_name", "birth_date", "phone", "address", "wa_number")


class ProfileRepository:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None

    def _row_to_entity(self, row: dict) -> ProfileEntity:
        return ProfileEntity(
            id=row["id"],
            full_name=row.get("full_name"),
            birth_date=parse_date(row.get("birth_date")),
            phone=row.get("phone"),
            address=row.get("address"),
            wa_number=row.get("wa_number"),
            updated_at=parse_datetime(row.get("updated_at")),
        )

    def get(self, user_id: str) -> ProfileEntity | None:
        """Fetch the profile of a user; ``None`` when no row exists."""
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one("SELECT * FROM profiles WHERE id = %s", (user_id,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            row = _MEM_PROFILES.get(user_id)
            return self._row_to_entity(row) if row else None

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("profiles").select("*").eq("id", user_id).single().execute()
        except APIError as exc:  # pragma: no cover - network
            err = from_api_error(exc)
            if err.not_found:
                return None
            raise err from exc
        return self._row_to_entity(res.data)  # pragma: no cover

    def create_default(self, user_id: str) -> None:
        if self.use_local_db and self.pg_client:
            self.pg_client.execute("INSERT INTO profiles (id) VALUES (%s)", (user_id,))
            return

        if self.disabled or self.client is None:
            if user_id in _MEM_PROFILES:
                raise StoreError(
                    'duplicate key value violates unique constraint "profiles_pkey"', code="23505"
                )
            _MEM_PROFILES[user_id] = {"id": user_id}
            return

        try:  # pragma: no cover - network
            self.client.table("profiles").insert({"id": user_id}).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc

    def update(self, user_id: str, **fields) -> None:
        """Patch the given columns and stamp ``updated_at``.

        Raises ``StoreError`` with the not-found code when the user has no row.
        """
        patch = {k: v for k, v in fields.items() if k in _UPDATABLE}
        patch["updated_at"] = datetime.now(UTC)

        if self.use_local_db and self.pg_client:
            columns = ", ".join(f"{name} = %s" for name in patch)
            affected = self.pg_client.execute(
                f"UPDATE profiles SET {columns} WHERE id = %s", (*patch.values(), user_id)
            )
            if affected == 0:
                raise not_found()
            return

        if self.disabled or self.client is None:
            row = _MEM_PROFILES.get(user_id)
            if row is None:
                raise not_found()
            row.update(patch)
            return

        data = {
            k: v.isoformat() if isinstance(v, (date, datetime)) else v for k, v in patch.items()
        }
        try:  # pragma: no cover - network
            res = self.client.table("profiles").update(data).eq("id", user_id).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        if not res.data:  # pragma: no cover - network
            raise not_found()
