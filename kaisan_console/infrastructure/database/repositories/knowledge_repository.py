from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime

from postgrest.exceptions import APIError
from supabase import Client

from kaisan_console.domain.entities.knowledge_entry import KnowledgeEntryEntity
from kaisan_console.infrastructure.database.postgres_client import get_postgres_client
from kaisan_console.infrastructure.database.row_utils import (
    from_api_error,
    not_found,
    parse_datetime,
)

TABLE = "kaisan_kbase"

# module-level in-memory store for disabled mode
_MEM_ENTRIES: dict[str, KnowledgeEntryEntity] = {}


class KnowledgeRepository:
    """Question/answer pairs the agent answers from.

    Entries are shared by every authenticated user; ``created_by`` only
    records the author.
    """

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None

    def _row_to_entity(self, row: dict) -> KnowledgeEntryEntity:
        return KnowledgeEntryEntity(
            id=str(row["id"]),
            question=row["question"],
            answer=row["answer"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row.get("updated_at")),
            created_by=row.get("created_by"),
        )

    def list_all(self) -> list[KnowledgeEntryEntity]:
        """All entries, newest first."""
        if self.use_local_db and self.pg_client:
            rows = self.pg_client.fetch_all(f"SELECT * FROM {TABLE} ORDER BY created_at DESC")
            return [self._row_to_entity(row) for row in rows]

        if self.disabled or self.client is None:
            return sorted(_MEM_ENTRIES.values(), key=lambda e: e.created_at, reverse=True)

        try:  # pragma: no cover - network
            res = self.client.table(TABLE).select("*").order("created_at", desc=True).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        return [self._row_to_entity(row) for row in res.data or []]  # pragma: no cover

    def get(self, entry_id: str) -> KnowledgeEntryEntity | None:
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one(f"SELECT * FROM {TABLE} WHERE id = %s", (entry_id,))
            return self._row_to_entity(row) if row else None

        if self.disabled or self.client is None:
            return _MEM_ENTRIES.get(entry_id)

        try:  # pragma: no cover - network
            res = self.client.table(TABLE).select("*").eq("id", entry_id).single().execute()
        except APIError as exc:  # pragma: no cover - network
            err = from_api_error(exc)
            if err.not_found:
                return None
            raise err from exc
        return self._row_to_entity(res.data)  # pragma: no cover

    def create(self, question: str, answer: str, created_by: str | None) -> KnowledgeEntryEntity:
        now = datetime.now(UTC)

        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one(
                f"""
                INSERT INTO {TABLE} (question, answer, created_by, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
                """,
                (question, answer, created_by, now, now),
            )
            return self._row_to_entity(row)

        if self.disabled or self.client is None:
            entity = KnowledgeEntryEntity(
                id=str(uuid.uuid4()),
                question=question,
                answer=answer,
                created_at=now,
                updated_at=now,
                created_by=created_by,
            )
            _MEM_ENTRIES[entity.id] = entity
            return entity

        data = {"question": question, "answer": answer, "created_by": created_by}
        try:  # pragma: no cover - network
            res = self.client.table(TABLE).insert(data).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        return self._row_to_entity(res.data[0])  # pragma: no cover

    def update(self, entry_id: str, question: str, answer: str) -> None:
        now = datetime.now(UTC)

        if self.use_local_db and self.pg_client:
            affected = self.pg_client.execute(
                f"UPDATE {TABLE} SET question = %s, answer = %s, updated_at = %s WHERE id = %s",
                (question, answer, now, entry_id),
            )
            if affected == 0:
                raise not_found()
            return

        if self.disabled or self.client is None:
            current = _MEM_ENTRIES.get(entry_id)
            if current is None:
                raise not_found()
            _MEM_ENTRIES[entry_id] = KnowledgeEntryEntity(
                id=current.id,
                question=question,
                answer=answer,
                created_at=current.created_at,
                updated_at=now,
                created_by=current.created_by,
            )
            return

        data = {"question": question, "answer": answer, "updated_at": now.isoformat()}
        try:  # pragma: no cover - network
            res = self.client.table(TABLE).update(data).eq("id", entry_id).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        if not res.data:  # pragma: no cover - network
            raise not_found()

    def delete(self, entry_id: str) -> None:
        """Delete one entry; a missing id raises the store's not-found error."""
        if self.use_local_db and self.pg_client:
            if self.pg_client.execute(f"DELETE FROM {TABLE} WHERE id = %s", (entry_id,)) == 0:
                raise not_found()
            return

        if self.disabled or self.client is None:
            if _MEM_ENTRIES.pop(entry_id, None) is None:
                raise not_found()
            return

        try:  # pragma: no cover - network
            res = self.client.table(TABLE).delete().eq("id", entry_id).execute()
        except APIError as exc:  # pragma: no cover - network
            raise from_api_error(exc) from exc
        if not res.data:  # pragma: no cover - network
            raise not_found()
