"""In-memory stand-in for the Nonplo backend REST API.

A small FastAPI app with the same routes and envelopes as the real backend.
Tests drive it through ``httpx.ASGITransport`` and inspect ``requests``,
``session_patches`` and the counters to assert on network behaviour.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class FakeBackend:
    def __init__(self):
        self.sessions: dict[str, dict] = {}
        self.files: dict[str, dict[str, dict]] = {}
        self.agents: dict[str, dict] = {}
        self.tool_settings: dict[str, dict[str, bool]] = {}
        self.conversations: list[dict] = []
        self.tickets: list[dict] = []

        # (method, path) of every request, in arrival order
        self.requests: list[tuple[str, str]] = []
        self.session_patches: list[dict] = []

        self.forbidden_words = ["küfür", "kötü kelime", "sik"]
        self.forbidden_word_calls = 0

        self.save_delays: list[float] = []
        self.fail_saves = False

        self.build_calls = 0
        self.build_delay = 0.0
        self.build_error: Optional[str] = None
        self.build_milestones: list[int] = []

        self.fail_file_names: set[str] = set()

        self.temperature_fails = False

        self.app = self._build_app()

    # ── Helpers for tests ────────────────────────────────────

    def calls(self, method: str, prefix: str = "") -> list[str]:
        return [p for m, p in self.requests if m == method and p.startswith(prefix)]

    def add_agent(self, user_id: str, **fields) -> dict:
        agent = {
            "id": fields.pop("id", str(uuid.uuid4())),
            "userId": user_id,
            "name": "Ayşe",
            "businessName": "Kahve Durağı",
            "industry": "Restoran & Cafe",
            "isActive": True,
            "temperature": "1.0",
            "createdAt": _now(),
            **fields,
        }
        self.agents[agent["id"]] = agent
        return agent

    # ── App ──────────────────────────────────────────────────

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        backend = self

        @app.middleware("http")
        async def record(request: Request, call_next):
            backend.requests.append((request.method, request.url.path))
            return await call_next(request)

        async def require_user(authorization: Optional[str] = Header(None)) -> str:
            if not authorization or not authorization.startswith("Bearer "):
                return ""
            return authorization.removeprefix("Bearer ")

        # ── Wizard sessions ──────────────────────────────────

        @app.post("/api/wizard/sessions", status_code=201)
        async def create_session(request: Request, token: str = Depends(require_user)):
            if not token:
                return _error(401, "Unauthorized")
            body = await request.json()
            session_id = str(uuid.uuid4())
            backend.sessions[session_id] = {
                "id": session_id,
                "currentStep": body.get("currentStep", 1),
                "personality": {},
                "createdAt": _now(),
                "updatedAt": _now(),
            }
            return {"data": {"id": session_id, "currentStep": body.get("currentStep", 1)}}

        @app.get("/api/wizard/sessions/{session_id}")
        async def get_session(session_id: str, token: str = Depends(require_user)):
            if not token:
                return _error(401, "Unauthorized")
            row = backend.sessions.get(session_id)
            if row is None:
                return _error(404, "Wizard session not found")
            return {"data": row}

        @app.patch("/api/wizard/sessions/{session_id}")
        async def update_session(session_id: str, request: Request, token: str = Depends(require_user)):
            if not token:
                return _error(401, "Unauthorized")
            body = await request.json()
            backend.session_patches.append(body)
            if backend.save_delays:
                await asyncio.sleep(backend.save_delays.pop(0))
            if backend.fail_saves:
                return _error(500, "Database unavailable")
            row = backend.sessions.get(session_id)
            if row is None:
                return _error(404, "Wizard session not found")
            row.update(body)
            return {"data": dict(row)}

        @app.post("/api/wizard/sessions/{session_id}/build")
        async def build(session_id: str, token: str = Depends(require_user)):
            if not token:
                return _error(401, "Unauthorized")
            backend.build_calls += 1
            await asyncio.sleep(backend.build_delay)
            if backend.build_error:
                return _error(500, backend.build_error)
            row = backend.sessions[session_id]
            agent = backend.add_agent(
                "user-1",
                name=row.get("employeeName"),
                businessName=row.get("businessName"),
                industry=row.get("industry"),
            )
            return {"data": {"agentId": agent["id"], "milestones": backend.build_milestones}}

        # ── Training files ───────────────────────────────────

        @app.post("/api/wizard/sessions/{session_id}/files", status_code=201)
        async def create_file(session_id: str, request: Request, token: str = Depends(require_user)):
            body = await request.json()
            if body["originalName"] in backend.fail_file_names:
                return _error(500, "Storage unavailable")
            record = {
                "id": str(uuid.uuid4()),
                "originalName": body["originalName"],
                "fileSize": body["fileSize"],
                "mimeType": body.get("mimeType"),
                "status": "uploading",
            }
            backend.files.setdefault(session_id, {})[record["id"]] = record
            return {"data": record}

        @app.patch("/api/wizard/sessions/{session_id}/files/{file_id}")
        async def update_file(session_id: str, file_id: str, request: Request, token: str = Depends(require_user)):
            record = backend.files.get(session_id, {}).get(file_id)
            if record is None:
                return _error(404, "File not found")
            record.update(await request.json())
            return {"data": record}

        @app.delete("/api/wizard/sessions/{session_id}/files/{file_id}")
        async def delete_file(session_id: str, file_id: str, token: str = Depends(require_user)):
            backend.files.get(session_id, {}).pop(file_id, None)
            return {"success": True}

        # ── Tools ────────────────────────────────────────────

        @app.post("/api/wizard/optimize-text")
        async def optimize_text(request: Request, token: str = Depends(require_user)):
            body = await request.json()
            text = (body.get("text") or "").strip()
            if not text:
                return _error(400, "Text is required")
            return {"optimizedText": f"{text} (optimized {body.get('fieldType')})"}

        @app.get("/api/tools/forbidden-words")
        async def forbidden_words():
            backend.forbidden_word_calls += 1
            return {"words": backend.forbidden_words}

        # ── Agents ───────────────────────────────────────────

        @app.get("/api/agents")
        async def list_agents(userId: str, token: str = Depends(require_user)):
            if not token:
                return _error(401, "Unauthorized")
            return {"agents": [a for a in backend.agents.values() if a["userId"] == userId]}

        @app.get("/api/agents/{agent_id}")
        async def get_agent(agent_id: str, token: str = Depends(require_user)):
            agent = backend.agents.get(agent_id)
            if agent is None:
                return _error(404, "Agent not found")
            return {"agent": agent}

        @app.put("/api/agents/{agent_id}")
        async def update_agent(agent_id: str, request: Request, token: str = Depends(require_user)):
            agent = backend.agents.get(agent_id)
            if agent is None:
                return _error(404, "Agent not found")
            body = await request.json()
            body.pop("userId", None)
            agent.update(body)
            return {"agent": agent}

        @app.delete("/api/agents/{agent_id}")
        async def delete_agent(agent_id: str, request: Request, token: str = Depends(require_user)):
            body = await request.json()
            agent = backend.agents.get(agent_id)
            if agent is None or agent["userId"] != body.get("userId"):
                return JSONResponse(status_code=404, content={"details": "Agent not found"})
            del backend.agents[agent_id]
            return {"success": True}

        @app.patch("/api/agents/{agent_id}/temperature")
        async def set_temperature(agent_id: str, request: Request, token: str = Depends(require_user)):
            if backend.temperature_fails:
                return _error(500, "Failed to update temperature")
            body = await request.json()
            backend.agents[agent_id]["temperature"] = body["temperature"]
            return {"message": "Temperature updated"}

        @app.get("/api/agents/{agent_id}/tool-settings")
        async def get_tool_settings(agent_id: str, token: str = Depends(require_user)):
            settings = backend.tool_settings.get(agent_id, {})
            return {"settings": [{"toolKey": k, "enabled": v} for k, v in settings.items()]}

        @app.post("/api/agents/{agent_id}/tool-settings")
        async def set_tool_setting(agent_id: str, request: Request, token: str = Depends(require_user)):
            body = await request.json()
            backend.tool_settings.setdefault(agent_id, {})[body["toolKey"]] = body["enabled"]
            return {"success": True}

        @app.get("/api/agents/{agent_id}/conversations")
        async def agent_conversations(agent_id: str, limit: int = 5, token: str = Depends(require_user)):
            rows = [c for c in backend.conversations if c["agentId"] == agent_id]
            return {"conversations": rows[:limit]}

        # ── Calendar / support ───────────────────────────────

        @app.get("/api/calendar/status")
        async def calendar_status(userId: str, agentId: str):
            return {"connected": False}

        @app.post("/api/support/ticket")
        async def support_ticket(request: Request, token: str = Depends(require_user)):
            body = await request.json()
            backend.tickets.append(body)
            return {"success": True, "ticketId": len(backend.tickets)}

        return app


def conversation_row(**fields: Any) -> dict:
    """A ``conversations`` row as delivered by realtime events (snake_case)."""
    return {
        "id": fields.pop("id", str(uuid.uuid4())),
        "agent_id": "agent-1",
        "channel": "whatsapp",
        "status": "open",
        "unread": False,
        "last_message_at": None,
        **fields,
    }
