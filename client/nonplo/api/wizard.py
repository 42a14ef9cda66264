"""Wizard session endpoints.

Endpoints:
  POST   /api/wizard/sessions                        → create session
  GET    /api/wizard/sessions/{id}                   → session snapshot
  PATCH  /api/wizard/sessions/{id}                   → partial update
  POST   /api/wizard/sessions/{id}/build             → provision the agent
  POST   /api/wizard/sessions/{id}/files             → register a training file
  PATCH  /api/wizard/sessions/{id}/files/{file_id}   → file status update
  DELETE /api/wizard/sessions/{id}/files/{file_id}   → remove a file
  POST   /api/wizard/optimize-text                   → AI text optimization
  GET    /api/tools/forbidden-words                  → moderation word list
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from nonplo.api.client import ApiClient
from nonplo.config import settings
from nonplo.exceptions import ApiError
from nonplo.schemas.wizard import FileStatus, WizardFile, WizardSession
from nonplo.utils.cache import cached

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap(body: Any) -> Any:
    """Return the ``data`` member of a ``{"data": ...}`` envelope."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def parse_model(model: type[ModelT], data: Any) -> ModelT:
    """Validate a response payload, reporting a mismatch as ``ApiError``.

    Raises:
        ApiError: If the payload does not fit ``model``
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error(f"Unexpected {model.__name__} payload from backend: {exc.errors()[0]['msg']}")
        raise ApiError(
            message="Sunucudan geçersiz yanıt alındı",
            status_code=httpx.codes.BAD_GATEWAY,
            error_code="INVALID_RESPONSE",
            details=exc.errors(include_url=False),
        ) from exc


class WizardApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def _session_path(self, session_id: str) -> str:
        return f"/api/wizard/sessions/{session_id}"

    async def create_session(self) -> WizardSession:
        body = await self.client.post("/api/wizard/sessions", json={"currentStep": 1})
        return parse_model(WizardSession, unwrap(body))

    async def get_session(self, session_id: str) -> WizardSession:
        body = await self.client.get(self._session_path(session_id))
        return parse_model(WizardSession, unwrap(body))

    async def update_session(self, session_id: str, payload: dict) -> WizardSession | None:
        """PATCH a camelCase payload. Returns the updated session when echoed back."""
        body = await self.client.patch(self._session_path(session_id), json=payload)
        data = unwrap(body)
        if isinstance(data, dict) and data.get("id"):
            return parse_model(WizardSession, data)
        return None

    async def build(self, session_id: str) -> dict:
        body = await self.client.post(f"{self._session_path(session_id)}/build")
        data = unwrap(body)
        return data if isinstance(data, dict) else {}

    async def optimize_text(self, text: str, field_type: str) -> str | None:
        body = await self.client.post(
            "/api/wizard/optimize-text",
            json={"text": text, "fieldType": field_type},
        )
        if isinstance(body, dict):
            return body.get("optimizedText") or None
        return None

    @cached(
        ttl=settings.forbidden_words_ttl,
        prefix="forbidden_words",
        key_builder=lambda self: self.client.base_url,
    )
    async def forbidden_words(self) -> list[str]:
        body = await self.client.get("/api/tools/forbidden-words")
        words = body.get("words", []) if isinstance(body, dict) else []
        return [str(w) for w in words if w]

    async def create_file(self, session_id: str, name: str, size: int, mime_type: str) -> WizardFile:
        body = await self.client.post(
            f"{self._session_path(session_id)}/files",
            json={"originalName": name, "fileSize": size, "mimeType": mime_type},
        )
        return parse_model(WizardFile, unwrap(body))

    async def update_file_status(self, session_id: str, file_id: str, status: FileStatus) -> None:
        await self.client.patch(
            f"{self._session_path(session_id)}/files/{file_id}",
            json={"status": status},
        )

    async def delete_file(self, session_id: str, file_id: str) -> None:
        await self.client.delete(f"{self._session_path(session_id)}/files/{file_id}")
