"""Schemas for dashboard resources: agents, conversations, messages, tickets."""

from typing import Any

from pydantic import field_validator

from nonplo.schemas.validators import validate_email
from nonplo.schemas.wizard import CamelModel


class Agent(CamelModel):
    id: str
    name: str | None = None
    business_name: str | None = None
    industry: str | None = None
    is_active: bool = True
    temperature: str | None = None
    openai_assistant_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    model_config = {**CamelModel.model_config, "extra": "allow"}

    @field_validator("temperature", mode="before")
    @classmethod
    def _temperature_str(cls, v: Any) -> Any:
        # Stored as text; older rows hold a number
        if isinstance(v, (int, float)):
            return str(v)
        return v


class AgentUpdate(CamelModel):
    user_id: str | None = None
    name: str | None = None
    is_active: bool | None = None


class ToolSetting(CamelModel):
    tool_key: str
    enabled: bool


class Conversation(CamelModel):
    id: str
    agent_id: str | None = None
    channel: str | None = None
    status: str = "open"
    unread: bool = False
    last_message_at: str | None = None
    customer_name: str | None = None
    created_at: str | None = None

    model_config = {**CamelModel.model_config, "extra": "allow"}


class Message(CamelModel):
    id: str
    conversation_id: str
    sender: str
    content: str = ""
    created_at: str | None = None


class CalendarStatus(CamelModel):
    connected: bool = False
    email: str | None = None
    expires_at: str | None = None


class SupportTicket(CamelModel):
    name: str = "Dashboard Destek Talebi"
    email: str
    subject: str
    message: str
    attachment_url: str | None = None
    attachment_name: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("subject", "message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()
