from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SystemPromptEntity:
    id: str
    prompt: str
    created_at: datetime
    updated_at: datetime | None = None
    created_by: str | None = None
