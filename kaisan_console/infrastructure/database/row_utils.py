from __future__ import annotations

from datetime import date, datetime

from postgrest.exceptions import APIError

from kaisan_console.domain.errors import NOT_FOUND_CODE, StoreError

# message PostgREST sends with PGRST116
NO_ROWS_MESSAGE = "JSON object requested, multiple (or no) rows returned"


def not_found() -> StoreError:
    return StoreError(NO_ROWS_MESSAGE, code=NOT_FOUND_CODE)


def from_api_error(exc: APIError) -> StoreError:
    return StoreError(exc.message or str(exc), code=exc.code)


def parse_datetime(value) -> datetime | None:
    # PostgreSQL returns datetime objects, Supabase returns ISO strings
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def parse_date(value) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)
