"""Message inbox: URL-synced filters and realtime-patched conversation list.

Filter query parameters:
  q        free-text search
  agentId  single agent (takes priority over ``agents``)
  agents   comma-separated agent ids
  channels comma-separated channels
  status   closed | pending (``all`` is the default and omitted)
  from/to  date range bounds
  unread   "1" for unread only
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from nonplo.dashboard.realtime import TableEvent
from nonplo.schemas.agent import Conversation, Message

logger = logging.getLogger(__name__)

StatusFilter = Literal["closed", "pending", "all"]

_STATUSES = ("closed", "pending", "all")

# The filter's "closed" corresponds to the stored "resolved" status
_STATUS_VALUES = {"closed": "resolved", "pending": "pending"}


def _parse_csv(value: Optional[str]) -> list[str]:
    return [v for v in value.split(",") if v] if value else []


@dataclass(frozen=True)
class DateRange:
    start: str = ""
    end: str = ""


@dataclass(frozen=True)
class MessageFilters:
    query: str = ""
    agents: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    status: StatusFilter = "all"
    date_range: Optional[DateRange] = None
    unread_only: bool = False

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "MessageFilters":
        agent_id = params.get("agentId")
        status = params.get("status")
        start, end = params.get("from"), params.get("to")
        return cls(
            query=params.get("q") or "",
            agents=[agent_id] if agent_id else _parse_csv(params.get("agents")),
            channels=_parse_csv(params.get("channels")),
            status=status if status in _STATUSES else "all",
            date_range=DateRange(start or "", end or "") if (start or end) else None,
            unread_only=params.get("unread") == "1",
        )

    def to_query(self, current: Mapping[str, str] | None = None) -> dict[str, str]:
        """Merge the filters into existing query params. ``page`` is dropped."""
        params = dict(current or {})
        for key in ("q", "agents", "channels", "status", "from", "to", "unread", "page"):
            params.pop(key, None)

        if self.query:
            params["q"] = self.query
        if self.agents:
            params["agents"] = ",".join(self.agents)
        if self.channels:
            params["channels"] = ",".join(self.channels)
        if self.status != "all":
            params["status"] = self.status
        if self.date_range and self.date_range.start:
            params["from"] = self.date_range.start
        if self.date_range and self.date_range.end:
            params["to"] = self.date_range.end
        if self.unread_only:
            params["unread"] = "1"
        return params

    def reset(self, agent_id: str | None = None) -> "MessageFilters":
        """Cleared filters; an agent pinned by the URL is kept."""
        return MessageFilters(agents=[agent_id] if agent_id else [])

    def matches(self, conversation: Conversation) -> bool:
        if self.agents and conversation.agent_id not in self.agents:
            return False
        if self.channels and conversation.channel not in self.channels:
            return False
        if self.status != "all" and conversation.status != _STATUS_VALUES[self.status]:
            return False
        if self.unread_only and not conversation.unread:
            return False
        return True


class Inbox:
    """Local inbox state patched by realtime events. Most recent event wins."""

    def __init__(self, filters: MessageFilters | None = None, conversations: list[Conversation] | None = None):
        self.filters = filters or MessageFilters()
        self.conversations: list[Conversation] = list(conversations or [])
        self.last_message: dict[str, Message] = {}
        self.selected_id: Optional[str] = None
        self.thread: list[Message] = []

    def set_filters(self, filters: MessageFilters) -> None:
        self.filters = filters

    def select(self, conversation_id: str, thread: list[Message] | None = None) -> None:
        self.selected_id = conversation_id
        self.thread = list(thread or [])

    def _index(self, conversation_id: str) -> int:
        for i, conversation in enumerate(self.conversations):
            if conversation.id == conversation_id:
                return i
        return -1

    # ── Realtime ─────────────────────────────────────────────

    def handle(self, event: TableEvent) -> None:
        if event.table == "messages" and event.event_type == "INSERT":
            self.on_message_insert(event.new)
        elif event.table == "conversations" and event.event_type == "INSERT":
            self.on_conversation_insert(event.new)
        elif event.table == "conversations" and event.event_type == "UPDATE":
            self.on_conversation_update(event.new)
        else:
            logger.debug(f"Inbox ignores {event.event_type} on {event.table}")

    def on_message_insert(self, row: Mapping[str, Any]) -> None:
        """Bump the conversation to the top and record the message."""
        message = Message.model_validate(row)
        idx = self._index(message.conversation_id)
        if idx != -1:
            conversation = self.conversations.pop(idx)
            update: dict[str, Any] = {"last_message_at": message.created_at}
            if message.sender == "user":
                update["unread"] = True
            self.conversations.insert(0, conversation.model_copy(update=update))

        self.last_message[message.conversation_id] = message
        if self.selected_id == message.conversation_id:
            self.thread.append(message)

    def on_conversation_insert(self, row: Mapping[str, Any]) -> None:
        conversation = Conversation.model_validate(row)
        if self.filters.matches(conversation):
            self.conversations.insert(0, conversation)

    def on_conversation_update(self, row: Mapping[str, Any]) -> None:
        idx = self._index(str(row.get("id")))
        if idx == -1:
            return
        merged = {**self.conversations[idx].model_dump(), **row}
        self.conversations[idx] = Conversation.model_validate(merged)

    # ── Local actions ────────────────────────────────────────

    def mark_read(self, conversation_id: str) -> bool:
        """Clear the unread flag. Returns False when nothing changed."""
        idx = self._index(conversation_id)
        if idx == -1 or not self.conversations[idx].unread:
            return False
        self.conversations[idx] = self.conversations[idx].model_copy(update={"unread": False})
        return True

    def remove(self, conversation_id: str) -> None:
        self.conversations = [c for c in self.conversations if c.id != conversation_id]
        self.last_message.pop(conversation_id, None)
        if self.selected_id == conversation_id:
            self.selected_id = None
            self.thread = []
