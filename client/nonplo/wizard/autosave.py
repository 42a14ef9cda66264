"""Debounced change handlers for step forms.

``AutoSaver`` turns a stream of form edits into at most one save per quiet
period. ``SocialLinkValidator`` does the same for per-platform link checks.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from nonplo.config import settings
from nonplo.exceptions import ValidationFailedError
from nonplo.schemas.validators import SocialLinkCheck, validate_social_link

if TYPE_CHECKING:
    from nonplo.wizard.controller import WizardController
    from nonplo.wizard.steps import StepForm

logger = logging.getLogger(__name__)


class AutoSaver:
    """Debounced auto-save for one step form.

    Every ``change()`` restarts the timer; when it fires, only the owned
    fields that differ from the session snapshot are saved. Invalid fields
    are reported in ``errors`` and as a warning; valid ones are still saved.
    """

    def __init__(self, controller: "WizardController", form: "StepForm", delay: float | None = None):
        self.controller = controller
        self.form = form
        self.delay = settings.autosave_debounce_seconds if delay is None else delay
        self._values: dict[str, Any] = {}
        self._timer: Optional[asyncio.Task] = None
        self.errors: dict[str, ValidationFailedError] = {}

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def change(self, values: dict[str, Any]) -> None:
        self._values = dict(values)
        self.cancel()
        self._timer = asyncio.create_task(self._fire())

    async def _fire(self) -> Optional[asyncio.Task]:
        await asyncio.sleep(self.delay)
        self._timer = None
        return self._save()

    def _save(self) -> Optional[asyncio.Task]:
        if not self._values:
            return None
        self.errors = {}
        snapshot = self.controller.snapshot
        try:
            diff = self.form.changes(self._values, snapshot)
        except ValidationFailedError:
            # Save the fields that are valid on their own; report the rest
            diff = {}
            for name, value in self._values.items():
                try:
                    diff.update(self.form.changes({name: value}, snapshot))
                except ValidationFailedError as exc:
                    self._reject(name, exc)

        if not diff:
            logger.debug(f"Step {self.form.step}: no changes to save")
            return None
        try:
            return self.controller.save_step_data(diff)
        except ValidationFailedError as exc:
            self._reject(exc.field or "", exc)
            return None

    def _reject(self, name: str, exc: ValidationFailedError) -> None:
        logger.info(f"Step {self.form.step}: invalid value for {name}: {exc.message}")
        self.errors[name] = exc
        self.controller.notify("warning", "Geçersiz değer", exc.message)

    async def flush(self) -> None:
        """Save pending values now and wait for the request."""
        self.cancel()
        task = self._save()
        if task is not None:
            await task

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None


class SocialLinkValidator:
    """Per-platform debounced social link validation."""

    def __init__(
        self,
        delay: float | None = None,
        on_result: Callable[[SocialLinkCheck], Any] | None = None,
    ):
        self.delay = settings.social_validation_debounce_seconds if delay is None else delay
        self.on_result = on_result
        self.results: dict[str, SocialLinkCheck] = {}
        self._pending: dict[str, asyncio.Task] = {}

    def check(self, platform: str, value: str | None) -> asyncio.Task:
        previous = self._pending.pop(platform, None)
        if previous is not None and not previous.done():
            previous.cancel()
        task = asyncio.create_task(self._run(platform, value))
        self._pending[platform] = task
        return task

    async def _run(self, platform: str, value: str | None) -> SocialLinkCheck:
        await asyncio.sleep(self.delay)
        self._pending.pop(platform, None)
        result = validate_social_link(platform, value)
        self.results[platform] = result
        if not result.valid:
            logger.debug(f"Social link rejected for {platform}: {result.code}")
        if self.on_result is not None:
            self.on_result(result)
        return result

    @property
    def all_valid(self) -> bool:
        return all(result.valid for result in self.results.values())

    def errors(self) -> dict[str, str]:
        return {p: r.message or "" for p, r in self.results.items() if not r.valid}

    def cancel(self) -> None:
        for task in self._pending.values():
            if not task.done():
                task.cancel()
        self._pending.clear()
