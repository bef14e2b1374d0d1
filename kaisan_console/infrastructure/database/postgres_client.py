"""Local PostgreSQL access for running the console without Supabase.

Enabled with USE_LOCAL_DB=1. Tables mirror the Supabase schema
(``profiles``, ``kaisan_kbase``, ``kaisan_systemprompt``).
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from kaisan_console.domain.errors import StoreError

logger = logging.getLogger(__name__)


def _store_error(exc: psycopg2.Error) -> StoreError:
    message = (exc.pgerror or str(exc)).strip()
    return StoreError(message, code=exc.pgcode)


def _rollback(conn) -> None:
    # a dropped connection cannot roll back
    try:
        conn.rollback()
    except psycopg2.Error as exc:
        logger.warning("PostgreSQL rollback failed: %s", exc)


class PostgresClient:
    """Pooled connections returning rows as dictionaries."""

    def __init__(self) -> None:
        try:
            self._pool = pool.SimpleConnectionPool(
                minconn=1,
                maxconn=int(os.getenv("POSTGRES_POOL_SIZE", "5")),
                host=os.getenv("POSTGRES_HOST", "localhost"),
                port=int(os.getenv("POSTGRES_PORT", "5432")),
                database=os.getenv("POSTGRES_DB", "kaisan"),
                user=os.getenv("POSTGRES_USER", "kaisan"),
                password=os.getenv("POSTGRES_PASSWORD", "kaisan_dev_password"),
            )
        except psycopg2.Error as exc:  # pragma: no cover
            raise StoreError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc

    @contextmanager
    def cursor(self) -> Iterator[Any]:
        """Yield a dict cursor inside a transaction committed on success."""
        try:
            conn = self._pool.getconn()
        except psycopg2.Error as exc:
            raise _store_error(exc) from exc
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                yield cur
            conn.commit()
        except psycopg2.Error as exc:
            _rollback(conn)
            raise _store_error(exc) from exc
        except Exception:
            _rollback(conn)
            raise
        finally:
            self._pool.putconn(conn)

    def fetch_one(self, query: str, params: tuple = ()) -> dict[str, Any] | None:
        with self.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return dict(row) if row else None

    def fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self.cursor() as cur:
            cur.execute(query, params)
            return [dict(row) for row in cur.fetchall()]

    def execute(self, query: str, params: tuple = ()) -> int:
        """Run a write and return the number of affected rows."""
        with self.cursor() as cur:
            cur.execute(query, params)
            return cur.rowcount

    def close(self) -> None:
        self._pool.closeall()


_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    global _POSTGRES_CLIENT
    if os.getenv("USE_LOCAL_DB", "0") != "1":
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
    return _POSTGRES_CLIENT


def close_postgres_client() -> None:
    global _POSTGRES_CLIENT
    if _POSTGRES_CLIENT is not None:
        _POSTGRES_CLIENT.close()
        _POSTGRES_CLIENT = None
