"""Realtime table change events (Supabase ``postgres_changes`` payloads)."""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

logger = logging.getLogger(__name__)

EventType = Literal["INSERT", "UPDATE", "DELETE"]


@dataclass(frozen=True)
class TableEvent:
    event_type: EventType
    table: str
    new: dict[str, Any] = field(default_factory=dict)
    old: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TableEvent":
        return cls(
            event_type=payload.get("eventType") or payload.get("type"),
            table=payload.get("table", ""),
            new=dict(payload.get("new") or payload.get("record") or {}),
            old=dict(payload.get("old") or payload.get("old_record") or {}),
        )


def apply_table_event(rows: list[dict], event: TableEvent) -> list[dict]:
    """Patch a local copy of a table with one change event.

    INSERT appends, UPDATE replaces the row with the same id, DELETE removes
    it. Unknown event types leave the rows unchanged.
    """
    if event.event_type == "INSERT":
        return [*rows, event.new]
    if event.event_type == "UPDATE":
        return [event.new if row.get("id") == event.new.get("id") else row for row in rows]
    if event.event_type == "DELETE":
        return [row for row in rows if row.get("id") != event.old.get("id")]

    logger.debug(f"Ignoring {event.event_type} event on {event.table}")
    return rows
