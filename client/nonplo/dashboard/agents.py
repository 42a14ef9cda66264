"""Agent management for the customer dashboard."""

import logging
from typing import Optional

from nonplo.api.agents import AgentsApi
from nonplo.exceptions import NonploError, ValidationFailedError
from nonplo.notifications import Notification, Notifier, log_notification
from nonplo.schemas.agent import Agent, AgentUpdate, Conversation

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = "1.0"


def parse_temperature(value: str | float) -> str:
    """Validate a temperature in 0.0..2.0; returns it as text.

    Raises:
        ValidationFailedError: If the value is not a number in range
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = None
    if number is None or not 0 <= number <= 2:
        raise ValidationFailedError(
            "Yaratıcılık değeri 0.0 ile 2.0 arasında olmalıdır.",
            field="temperature",
        )
    return str(value)


class AgentDirectory:
    """The signed-in user's agents, kept in sync with the backend."""

    def __init__(self, api: AgentsApi, user_id: str, notifier: Notifier | None = None):
        self.api = api
        self.user_id = user_id
        self.notifier = notifier or log_notification
        self.agents: dict[str, Agent] = {}

    def _notify(self, level, title: str, message: str) -> None:
        self.notifier(Notification(level=level, title=title, message=message))

    def get(self, agent_id: str) -> Optional[Agent]:
        return self.agents.get(agent_id)

    async def refresh(self) -> list[Agent]:
        agents = await self.api.list_agents(self.user_id)
        self.agents = {agent.id: agent for agent in agents}
        return agents

    async def toggle_active(self, agent_id: str) -> Agent:
        agent = self.agents.get(agent_id) or await self.api.get_agent(agent_id, self.user_id)
        target = not agent.is_active
        try:
            await self.api.update_agent(
                agent_id,
                AgentUpdate(user_id=self.user_id, is_active=target),
            )
        except NonploError:
            logger.exception(f"Failed to toggle agent {agent_id}")
            self._notify("error", "Hata", "Dijital Çalışan durumu güncellenemedi.")
            raise

        updated = agent.model_copy(update={"is_active": target})
        self.agents[agent_id] = updated
        self._notify("success", "Başarılı", f"Dijital Çalışan {'aktif' if target else 'pasif'} edildi.")
        return updated

    async def delete(self, agent_id: str) -> None:
        try:
            await self.api.delete_agent(agent_id, self.user_id)
        except NonploError:
            logger.exception(f"Failed to delete agent {agent_id}")
            self._notify("error", "Hata", "Dijital Çalışan silinemedi.")
            raise
        self.agents.pop(agent_id, None)
        self._notify("success", "Başarılı", "Dijital Çalışan silindi.")

    async def set_temperature(self, agent_id: str, value: str | float) -> Agent:
        """Optimistically apply a new temperature; rolled back if the PATCH fails.

        Raises:
            ValidationFailedError: If the value is outside 0.0..2.0
            NonploError: If the backend rejects the update
        """
        temperature = parse_temperature(value)
        agent = self.agents.get(agent_id) or await self.api.get_agent(agent_id, self.user_id)
        previous = agent.temperature or DEFAULT_TEMPERATURE

        self.agents[agent_id] = agent.model_copy(update={"temperature": temperature})
        try:
            await self.api.set_temperature(agent_id, temperature)
        except NonploError:
            logger.warning(f"Temperature update for agent {agent_id} failed; restoring {previous}")
            self.agents[agent_id] = agent.model_copy(update={"temperature": previous})
            self._notify("error", "Güncelleme Başarısız", "Lütfen tekrar deneyin.")
            raise

        self._notify("success", "Güncellendi", "Yaratıcılık seviyesi başarıyla güncellendi.")
        return self.agents[agent_id]

    async def tool_settings(self, agent_id: str) -> dict[str, bool]:
        return {s.tool_key: s.enabled for s in await self.api.tool_settings(agent_id)}

    async def set_tool(self, agent_id: str, tool_key: str, enabled: bool) -> None:
        await self.api.set_tool(agent_id, tool_key, enabled)

    async def recent_conversations(self, agent_id: str, limit: int = 5) -> list[Conversation]:
        return await self.api.conversations(agent_id, limit=limit)
