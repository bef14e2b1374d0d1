from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class KnowledgeEntryEntity:
    id: str
    question: str
    answer: str
    created_at: datetime
    updated_at: datetime | None = None
    created_by: str | None = None  # user id of the author
