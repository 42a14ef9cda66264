"""Request/response schemas and validators."""

from nonplo.schemas.wizard import (  # noqa: F401
    AddressData,
    DayHours,
    HolidaysConfig,
    Personality,
    WizardFile,
    WizardSession,
    WizardSessionUpdate,
)
from nonplo.schemas.agent import (  # noqa: F401
    Agent,
    Conversation,
    Message,
    SupportTicket,
    ToolSetting,
)
