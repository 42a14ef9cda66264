"""Customer dashboard state: agents, inbox and realtime patches."""

from nonplo.dashboard.agents import AgentDirectory  # noqa: F401
from nonplo.dashboard.inbox import Inbox, MessageFilters  # noqa: F401
from nonplo.dashboard.realtime import TableEvent, apply_table_event  # noqa: F401
