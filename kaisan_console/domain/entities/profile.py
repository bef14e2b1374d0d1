from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class ProfileEntity:
    id: str  # user id from Supabase auth
    full_name: str | None = None
    birth_date: date | None = None
    phone: str | None = None
    address: str | None = None
    wa_number: str | None = None  # digits only: country + area + local
    updated_at: datetime | None = None
