"""Digital employee creation wizard."""

from nonplo.wizard.controller import WizardController  # noqa: F401
from nonplo.wizard.steps import WizardStep, form_for, can_proceed  # noqa: F401
from nonplo.wizard.summary import build_summary  # noqa: F401
