"""Training file uploads for step 7.

Files are checked (extension, size) before anything is sent. Accepted files
get a backend record; the uploaded → processing → indexed transitions are
simulated client-side with timers and mirrored to the backend, since the
real indexing pipeline does not report per-file progress yet.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from nonplo.config import settings
from nonplo.exceptions import FileRejectedError, NonploError, WizardStateError
from nonplo.schemas.validators import format_file_size, validate_training_file
from nonplo.schemas.wizard import FileStatus, WizardFile

if TYPE_CHECKING:
    from nonplo.wizard.controller import WizardController

logger = logging.getLogger(__name__)

STATUS_LABELS: dict[str, str] = {
    "uploading": "Yükleniyor...",
    "uploaded": "Yüklendi",
    "processing": "İşleniyor...",
    "indexed": "Hazır",
    "error": "Hata",
}

SIMULATED_STATUSES: tuple[FileStatus, ...] = ("uploaded", "processing", "indexed")


@dataclass
class UploadResult:
    accepted: list[WizardFile] = field(default_factory=list)
    rejected: list[FileRejectedError] = field(default_factory=list)


class TrainingFiles:
    def __init__(
        self,
        controller: "WizardController",
        delays: tuple[float, ...] | None = None,
        max_bytes: int | None = None,
    ):
        self.controller = controller
        self.delays = tuple(delays) if delays is not None else tuple(settings.file_status_delays)
        self.max_bytes = max_bytes or settings.max_upload_bytes
        self.files: dict[str, WizardFile] = {}
        self._timers: dict[str, list[asyncio.Task]] = {}

    def _session_id(self) -> str:
        if not self.controller.session_id:
            raise WizardStateError("No wizard session", error_code="NO_SESSION")
        return self.controller.session_id

    async def upload(self, candidates: Iterable[tuple[str, int]]) -> UploadResult:
        """Register ``(filename, size)`` pairs as training files.

        Every candidate is validated before the first request; rejected
        files never reach the backend. A file the backend fails to store is
        added to ``rejected`` and the rest of the batch still goes through.
        """
        session_id = self._session_id()
        result = UploadResult()
        valid: list[tuple[str, int, str]] = []

        for filename, size in candidates:
            try:
                mime_type = validate_training_file(filename, size, self.max_bytes)
            except FileRejectedError as exc:
                logger.info(f"Rejected training file: {exc.message}")
                self.controller.notify("warning", "Dosya reddedildi", exc.message)
                result.rejected.append(exc)
                continue
            valid.append((filename, size, mime_type))

        for filename, size, mime_type in valid:
            try:
                record = await self.controller.api.create_file(session_id, filename, size, mime_type)
            except NonploError as exc:
                logger.warning(f"Upload of {filename} failed: {exc.message}")
                self.controller.notify("warning", "Dosya yüklenemedi", f"{filename}: {exc.message}")
                result.rejected.append(FileRejectedError(filename, exc.message))
                continue
            self.files[record.id] = record
            self._timers[record.id] = self._schedule(session_id, record.id)
            result.accepted.append(record)

        if result.accepted:
            previous = (self.controller.snapshot.training_files_count if self.controller.snapshot else None) or 0
            self.controller.save_step_data({
                "training_files_count": previous + len(result.accepted),
                "files_index_status": "processing",
            })

        return result

    def _schedule(self, session_id: str, file_id: str) -> list[asyncio.Task]:
        return [
            asyncio.create_task(self._advance(session_id, file_id, status, delay))
            for status, delay in zip(SIMULATED_STATUSES, self.delays)
        ]

    async def _advance(self, session_id: str, file_id: str, status: FileStatus, delay: float) -> None:
        await asyncio.sleep(delay)
        record = self.files.get(file_id)
        if record is None:
            return
        self.files[file_id] = record.model_copy(update={"status": status})
        try:
            await self.controller.api.update_file_status(session_id, file_id, status)
        except NonploError as exc:
            logger.warning(f"File {file_id} status update to {status} failed: {exc.message}")

    async def remove(self, file_id: str) -> None:
        """Cancel pending status updates and delete the file record."""
        session_id = self._session_id()
        self._cancel_timers(file_id)
        self.files.pop(file_id, None)
        await self.controller.api.delete_file(session_id, file_id)

    def _cancel_timers(self, file_id: str) -> None:
        for task in self._timers.pop(file_id, []):
            if not task.done():
                task.cancel()

    def cancel_all(self) -> None:
        for file_id in list(self._timers):
            self._cancel_timers(file_id)

    async def wait_until_settled(self) -> None:
        """Wait for every scheduled status update to finish."""
        tasks = [t for timers in self._timers.values() for t in timers]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    def status_label(status: str) -> str:
        return STATUS_LABELS.get(status, status)

    @staticmethod
    def size_label(size: int) -> str:
        return format_file_size(size)
