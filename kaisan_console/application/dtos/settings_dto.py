"""Bodies and views of the single-record pages: prompt, profile, WhatsApp and memory reset."""
from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from kaisan_console.application.dtos.common_dto import PageView


class SystemPromptBody(BaseModel):
    prompt: str = Field("", description="System prompt that drives the agent")
    id: Optional[str] = Field(None, description="Id of the prompt row being edited")


class SystemPromptView(PageView):
    prompt: str = ""
    prompt_id: Optional[str] = None


class ProfileBody(BaseModel):
    full_name: str = Field("", examples=["Maria Silva"])
    birth_date: Optional[date] = None
    phone: str = ""
    address: str = ""

    @field_validator("birth_date", mode="before")
    @classmethod
    def _blank_date(cls, value):
        # the date input posts an empty string when cleared
        return value or None


class ProfileView(PageView):
    full_name: str = ""
    birth_date: Optional[date] = None
    phone: str = ""
    address: str = ""


class WhatsappBody(BaseModel):
    area_code: str = Field("", description="Two-digit area code (DDD)", examples=["21"])
    number: str = Field("", description="Local number, hyphen optional", examples=["98765-4321"])


class WhatsappView(PageView):
    country_code: str = Field("55", description="Country code, display only")
    area_code: str = ""
    number: str = Field("", description="Local number formatted for display")
    profile_found: bool = True


class ResetMemoryBody(BaseModel):
    country_code: Optional[str] = Field(None, description="Defaults to the configured country code")
    area_code: str = Field("", examples=["21"])
    phone_number: str = Field("", examples=["982280802"])


class ResetMemoryView(PageView):
    country_code: str = "55"
    area_code: str = ""
    phone_number: str = ""
