"""Dashboard endpoints: agents, tool settings, conversations, calendar, support."""

from typing import Any

from nonplo.api.client import ApiClient
from nonplo.api.wizard import parse_model, unwrap
from nonplo.schemas.agent import Agent, AgentUpdate, CalendarStatus, Conversation, SupportTicket, ToolSetting


def _items(body: Any, key: str) -> list:
    data = unwrap(body)
    if isinstance(data, dict):
        data = data.get(key, [])
    return data if isinstance(data, list) else []


class AgentsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    # ── Agents ───────────────────────────────────────────────

    async def list_agents(self, user_id: str) -> list[Agent]:
        body = await self.client.get("/api/agents", params={"userId": user_id})
        return [parse_model(Agent, a) for a in _items(body, "agents")]

    async def get_agent(self, agent_id: str, user_id: str | None = None) -> Agent:
        params = {"userId": user_id} if user_id else None
        body = await self.client.get(f"/api/agents/{agent_id}", params=params)
        data = unwrap(body)
        if isinstance(data, dict) and "agent" in data:
            data = data["agent"]
        return parse_model(Agent, data)

    async def update_agent(self, agent_id: str, update: AgentUpdate) -> Any:
        return await self.client.put(
            f"/api/agents/{agent_id}",
            json=update.model_dump(by_alias=True, exclude_none=True),
        )

    async def delete_agent(self, agent_id: str, user_id: str) -> dict:
        body = await self.client.delete(f"/api/agents/{agent_id}", json={"userId": user_id})
        return body if isinstance(body, dict) else {}

    async def set_temperature(self, agent_id: str, temperature: str) -> Any:
        return await self.client.patch(
            f"/api/agents/{agent_id}/temperature",
            json={"temperature": temperature},
        )

    # ── Tool settings ────────────────────────────────────────

    async def tool_settings(self, agent_id: str) -> list[ToolSetting]:
        body = await self.client.get(f"/api/agents/{agent_id}/tool-settings")
        return [parse_model(ToolSetting, t) for t in _items(body, "settings")]

    async def set_tool(self, agent_id: str, tool_key: str, enabled: bool) -> Any:
        return await self.client.post(
            f"/api/agents/{agent_id}/tool-settings",
            json={"toolKey": tool_key, "enabled": enabled},
        )

    # ── Conversations ────────────────────────────────────────

    async def conversations(self, agent_id: str, limit: int = 5) -> list[Conversation]:
        body = await self.client.get(
            f"/api/agents/{agent_id}/conversations",
            params={"limit": limit},
        )
        return [parse_model(Conversation, c) for c in _items(body, "conversations")]

    # ── Calendar ─────────────────────────────────────────────

    async def calendar_status(self, user_id: str, agent_id: str) -> CalendarStatus:
        body = await self.client.get(
            "/api/calendar/status",
            params={"userId": user_id, "agentId": agent_id},
        )
        return parse_model(CalendarStatus, unwrap(body) or {})

    async def calendar_auth_url(self, user_id: str, agent_id: str) -> str:
        body = await self.client.get(
            "/api/calendar/auth/url",
            params={"userId": user_id, "agentId": agent_id},
        )
        data = unwrap(body)
        return data.get("authUrl", "") if isinstance(data, dict) else ""

    async def calendar_disconnect(self, user_id: str, agent_id: str) -> Any:
        return await self.client.post(
            "/api/calendar/disconnect",
            json={"userId": user_id, "agentId": agent_id},
        )

    # ── Support ──────────────────────────────────────────────

    async def create_ticket(self, ticket: SupportTicket) -> Any:
        return await self.client.post(
            "/api/support/ticket",
            json=ticket.model_dump(by_alias=True, exclude_none=True),
        )
