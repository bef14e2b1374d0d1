from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from kaisan_console.application.dtos.common_dto import PageView
from kaisan_console.domain.entities.knowledge_entry import KnowledgeEntryEntity

WebhookMode = Literal["immediate", "deferred"]


class KnowledgeEntryBody(BaseModel):
    """Question/answer pair submitted from the knowledge base form."""
    question: str = Field("", description="Question the agent may receive", examples=["Qual o horário?"])
    answer: str = Field("", description="Answer the agent should give", examples=["Das 8h às 18h."])
    id: Optional[str] = Field(None, description="Entry being edited; omit to create")


class KnowledgeEntryItem(BaseModel):
    id: str
    question: str
    answer: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None

    @classmethod
    def from_entity(cls, entity: KnowledgeEntryEntity) -> KnowledgeEntryItem:
        return cls(
            id=entity.id,
            question=entity.question,
            answer=entity.answer,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            created_by=entity.created_by,
        )


class KnowledgeForm(BaseModel):
    question: str = ""
    answer: str = ""
    editing_id: Optional[str] = Field(None, description="Entry in edit mode, if any")


class KnowledgeBaseView(PageView):
    entries: list[KnowledgeEntryItem] = Field(default_factory=list, description="Entries, newest first")
    form: KnowledgeForm = Field(default_factory=KnowledgeForm)
    dirty: bool = Field(False, description="Whether changes are waiting for an explicit save")
    pending_notifications: int = Field(0, description="Notifications sent on the next save")
    webhook_mode: WebhookMode = Field("immediate", description="When the knowledge webhook fires")
