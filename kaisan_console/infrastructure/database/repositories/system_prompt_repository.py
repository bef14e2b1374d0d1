from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from kaisan_console.domain.entities.system_prompt import SystemPromptEntity
from kaisan_console.infrastructure.database.postgres_client import get_postgres_client
from kaisan_console.infrastructure.database.row_utils import (
    from_api_error,
    not_found,
    parse_datetime,
)

TABLE = "kaisan_systemprompt"

# module-level in-memory store for disabled mode
_MEM_PROMPTS: dict[str, SystemPromptEntity] = {}


class SystemPromptRepository:
    """The agent's system prompt. A single row is expected."""

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None

    def _row_to_entity(self, row: dict) -> SystemPromptEntity:
        return SystemPromptEntity(
            id=str(row["id"]),
            prompt=row["prompt"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row.get("updated_at")),
            created_by=row.get("created_by"),
        )

    def get_current(self) -> SystemPromptEntity | None:
        """The prompt row, or ``None`` when none was created yet."""
        if self.use_local_db and self.pg_client:
            rows = self.pg_client.fetch_all(f"SELECT * FROM {TABLE} LIMIT 2")
            if not rows:
                return None
            if len(rows) > 1:
                raise not_found()
            return self._row_to_entity(rows[0])

        if self.disabled or self.client is None:
            if not _MEM_PROMPTS:
                return None
            if len(_MEM_PROMPTS) > 1:
                raise not_found()
            return next(iter(_MEM_PROMPTS.values()))

        try:  # pragma: no cover - network
            res = self.client.table(TABLE).select("*").single().execute()
        except APIError as exc:  # pragma: no cover - network
            err = from_api_error(exc)
            if err.not_found:
                return None
            raise err from exc
        return self._row_to_entity(res.data)  # pragma: no cover

    def create(self, prompt: str, created_by: str | None) -> SystemPromptEntity:
        now = datetime.now(UTC)

        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one(
                f"""
                INSERT INTO {TABLE} (prompt, created_by, created_at, updated_at)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (prompt, created_by, now, now),
            )
            return self._row_to_entity(row)

        if self.disabled or self.client is None:
            entity = SystemPromptEntity(
                id=str(uuid.uuid4()), prompt=prompt, created_at=now, updated_at=now, created_by=created_by
            )
            _MEM_PROMPTS[entity.id] = entity
            return entity

        try:  # pragma: no cover - network
            res = self.client.table(TABLE).insert({"prompt": prompt, "created_by": created_by}).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        return self._row_to_entity(res.data[0])  # pragma: no cover

    def update(self, prompt_id: str, prompt: str) -> None:
        now = datetime.now(UTC)

        if self.use_local_db and self.pg_client:
            affected = self.pg_client.execute(
                f"UPDATE {TABLE} SET prompt = %s, updated_at = %s WHERE id = %s", (prompt, now, prompt_id)
            )
            if affected == 0:
                raise not_found()
            return

        if self.disabled or self.client is None:
            current = _MEM_PROMPTS.get(prompt_id)
            if current is None:
                raise not_found()
            _MEM_PROMPTS[prompt_id] = SystemPromptEntity(
                id=current.id,
                prompt=prompt,
                created_at=current.created_at,
                updated_at=now,
                created_by=current.created_by,
            )
            return

        try:  # pragma: no cover - network
            res = (
                self.client.table(TABLE)
                .update({"prompt": prompt, "updated_at": now.isoformat()})
                .eq("id", prompt_id)
                .execute()
            )
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        if not res.data:  # pragma: no cover - network
            raise not_found()
