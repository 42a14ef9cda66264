"""Wizard session controller: the single source of truth for one wizard run.

Lifecycle:
  open()        → auth check, then create (or resume) a backend session
  save_step_data() → optimistic local merge + ordered background PATCH
  next_step() / prev_step() → ±1 within [1, 11], persisted via the save path
  build_agent() → provision from the approval step, at most one in flight
  close()       → refused while building; the backend row is kept

Save ordering:
  Saves are dispatched one at a time in issue order. Each carries a sequence
  number; a response is applied to the snapshot only if no newer save was
  issued in the meantime, so a slow early response never overwrites later
  edits. Save failures are reported as notifications and never raised.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from nonplo.api.wizard import WizardApi
from nonplo.auth.session import AuthProvider, auth_redirect_url
from nonplo.config import settings
from nonplo.exceptions import (
    AuthRequiredError,
    BuildError,
    NonploError,
    StepIncompleteError,
    ValidationFailedError,
    WizardStateError,
)
from nonplo.notifications import Level, Notification, Notifier, log_notification
from nonplo.schemas.wizard import TOTAL_STEPS, WizardSession, WizardSessionUpdate
from nonplo.wizard.autosave import AutoSaver
from nonplo.wizard.files import TrainingFiles
from nonplo.wizard.provisioning import ProvisioningProgress
from nonplo.wizard.steps import StepForm, can_proceed, form_for, missing_fields

logger = logging.getLogger(__name__)


class WizardController:
    def __init__(
        self,
        api: WizardApi,
        auth: AuthProvider,
        notifier: Notifier | None = None,
        on_success: Callable[[str], Any] | None = None,
    ):
        self.api = api
        self.auth = auth
        self.notifier = notifier or log_notification
        self.on_success = on_success

        self.session_id: Optional[str] = None
        self.current_step = 1
        self.is_open = False
        self.is_creating = False
        self.snapshot: Optional[WizardSession] = None
        self.progress = ProvisioningProgress()

        self._save_seq = 0
        self._save_lock = asyncio.Lock()
        self._save_tasks: set[asyncio.Task] = set()
        self._autosavers: list[AutoSaver] = []
        self._files: Optional[TrainingFiles] = None

    # ── Notifications ────────────────────────────────────────

    def notify(self, level: Level, title: str, message: str) -> None:
        self.notifier(Notification(level=level, title=title, message=message))

    # ── Open / load ──────────────────────────────────────────

    async def open(self, resume_id: str | None = None) -> WizardSession:
        """Start a wizard run for the signed-in user.

        Raises:
            AuthRequiredError: No auth session; nothing is created
            NonploError: Session creation or resume failed
        """
        auth_session = await self.auth.get_session()
        if auth_session is None:
            self.is_open = False
            error = AuthRequiredError(redirect_url=auth_redirect_url(settings.wizard_entry_path))
            self.notify("error", "Giriş Gerekli", error.message)
            raise error

        try:
            if resume_id:
                snapshot = await self.api.get_session(resume_id)
            else:
                snapshot = await self.api.create_session()
        except NonploError:
            logger.exception("Wizard session could not be opened")
            self.notify("error", "Hata", "Wizard oturumu oluşturulamadı")
            raise

        self.session_id = snapshot.id
        self.current_step = snapshot.current_step or 1
        self.snapshot = snapshot
        self.is_open = True
        self.is_creating = False
        self.progress.reset()
        logger.info(f"Wizard session {snapshot.id} opened at step {self.current_step}")
        return snapshot

    async def load_session(self, session_id: str | None = None) -> Optional[WizardSession]:
        """Fetch the session snapshot. Returns None while the wizard is closed."""
        if not self.is_open:
            return None
        session_id = session_id or self.session_id
        if session_id is None:
            return None

        snapshot = await self.api.get_session(session_id)
        # Pending saves hold newer local edits than the fetched row.
        if session_id == self.session_id and not self.saves_pending:
            self.snapshot = snapshot
        return snapshot

    # ── Saving ───────────────────────────────────────────────

    def save_step_data(self, partial: WizardSessionUpdate | dict[str, Any]) -> Optional[asyncio.Task]:
        """Merge ``partial`` locally and schedule its PATCH.

        Returns the scheduled task, or None when no session is open.

        Raises:
            ValidationFailedError: If ``partial`` does not match the session schema
        """
        if not self.is_open or self.session_id is None:
            logger.warning("save_step_data called without an open wizard session")
            return None

        if isinstance(partial, WizardSessionUpdate):
            update = partial
        else:
            try:
                update = WizardSessionUpdate.model_validate(partial)
            except ValidationError as exc:
                first = exc.errors()[0]
                raise ValidationFailedError(first["msg"], field=str(first["loc"][0])) from exc

        changes = update.model_dump(exclude_unset=True)
        if self.snapshot is not None:
            self.snapshot = WizardSession.model_validate({**self.snapshot.model_dump(), **changes})

        payload = update.model_dump(by_alias=True, exclude_unset=True, mode="json")
        payload["currentStep"] = self.current_step
        payload["updatedAt"] = datetime.now(timezone.utc).isoformat()

        self._save_seq += 1
        task = asyncio.create_task(self._dispatch_save(self.session_id, self._save_seq, payload))
        self._save_tasks.add(task)
        task.add_done_callback(self._save_tasks.discard)
        return task

    async def _dispatch_save(self, session_id: str, seq: int, payload: dict) -> Optional[WizardSession]:
        async with self._save_lock:
            try:
                updated = await self.api.update_session(session_id, payload)
            except NonploError as exc:
                logger.warning(f"Save #{seq} for session {session_id} failed: {exc.message}")
                self.notify("error", "Hata", "Değişiklikler kaydedilemedi")
                return None

            if seq < self._save_seq:
                logger.debug(f"Ignoring stale save response #{seq} (latest #{self._save_seq})")
                return updated
            if updated is not None and session_id == self.session_id:
                self.snapshot = updated
            return updated

    @property
    def saves_pending(self) -> bool:
        return any(not t.done() for t in self._save_tasks)

    async def wait_for_saves(self) -> None:
        """Wait until every scheduled save has finished."""
        while True:
            pending = [t for t in self._save_tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def autosaver(self, step: int | None = None, delay: float | None = None) -> AutoSaver:
        """Debounced saver for a step's form, cancelled on close."""
        saver = AutoSaver(self, self.form(step), delay=delay)
        self._autosavers.append(saver)
        return saver

    # ── Navigation ───────────────────────────────────────────

    def form(self, step: int | None = None) -> StepForm:
        return form_for(step or self.current_step)

    def can_proceed(self) -> bool:
        return can_proceed(self.current_step, self.snapshot)

    def next_step(self) -> int:
        """Advance one step; a no-op on the last step.

        Raises:
            StepIncompleteError: Required fields of the current step are missing
        """
        self._require_open()
        if self.current_step >= TOTAL_STEPS:
            return self.current_step
        if not self.can_proceed():
            raise StepIncompleteError(self.current_step, missing_fields(self.current_step, self.snapshot))

        self.current_step += 1
        self.save_step_data({"current_step": self.current_step})
        return self.current_step

    def prev_step(self) -> int:
        """Go back one step; a no-op on the first step."""
        self._require_open()
        if self.current_step <= 1:
            return self.current_step

        self.current_step -= 1
        self.save_step_data({"current_step": self.current_step})
        return self.current_step

    def _require_open(self) -> None:
        if not self.is_open or self.session_id is None:
            raise WizardStateError("Wizard is not open", error_code="WIZARD_CLOSED")

    # ── Files ────────────────────────────────────────────────

    @property
    def files(self) -> TrainingFiles:
        if self._files is None:
            self._files = TrainingFiles(self)
        return self._files

    # ── Build ────────────────────────────────────────────────

    def report_milestone(self, stage_id: int) -> None:
        """Provisioning stage finished, as pushed by the backend."""
        if self.is_creating:
            self.progress.mark_milestone(stage_id)

    async def build_agent(self) -> Optional[str]:
        """Provision the agent from the approval step.

        Returns the new agent id, or None if a build is already running.

        Raises:
            WizardStateError: No open session, or not on the approval step
            BuildError: The backend refused or failed the build
        """
        if self.is_creating:
            logger.info(f"Build already running for session {self.session_id}; ignoring")
            return None
        self._require_open()
        if self.current_step != TOTAL_STEPS:
            raise WizardStateError(
                f"Agent can only be built from step {TOTAL_STEPS}",
                error_code="NOT_ON_APPROVAL_STEP",
            )

        self.is_creating = True
        self.progress.start()
        session_id = self.session_id
        data: Optional[dict] = None

        try:
            for saver in self._autosavers:
                await saver.flush()
            await self.wait_for_saves()
            data = await self.api.build(session_id)
        except NonploError as exc:
            message = exc.message or "Agent oluşturulamadı"
            logger.warning(f"Build failed for session {session_id}: {message}")
            self.notify("error", "Hata", message)
            raise BuildError(message, status_code=exc.status_code) from exc
        finally:
            # Any failure, of any type, releases the guard
            if data is None:
                self.is_creating = False
                self.progress.reset()

        for stage_id in data.get("milestones") or []:
            self.progress.mark_milestone(int(stage_id))
        self.progress.complete()

        agent_id = data.get("agentId")
        logger.info(f"Agent {agent_id} built from session {session_id}")
        self.notify("success", "Başarılı!", "Dijital çalışanınız başarıyla oluşturuldu")

        self.is_creating = False
        self.close()
        if self.on_success is not None:
            self.on_success(agent_id)
        return agent_id

    # ── Close ────────────────────────────────────────────────

    def close(self) -> bool:
        """Close the wizard. Refused (returns False) while a build runs."""
        if self.is_creating:
            self.notify("warning", "Uyarı", "Agent oluşturma işlemi devam ediyor, kapatılamaz")
            return False

        for saver in self._autosavers:
            saver.cancel()
        self._autosavers.clear()
        if self._files is not None:
            self._files.cancel_all()
            self._files = None

        if self.session_id:
            logger.info(f"Wizard session {self.session_id} closed at step {self.current_step}")
        self.session_id = None
        self.snapshot = None
        self.current_step = 1
        self.is_open = False
        return True
