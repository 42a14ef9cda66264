"""Backend REST API client."""

from nonplo.api.client import ApiClient  # noqa: F401
from nonplo.api.wizard import WizardApi  # noqa: F401
from nonplo.api.agents import AgentsApi  # noqa: F401
