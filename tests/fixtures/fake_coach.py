"""
In-memory coach service for client, registry and CLI tests.

Usage:
    state = FakeCoachState.seeded()
    async with fake_client(state) as client:
        hooks = await client.fetch_hooks()

Set `state.gate` to an asyncio.Event to hold PUT/trigger requests in flight
until the test sets it.
"""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from coach_console.client import CoachClient

BASE_URL = "http://coach.test"

SEED_HOOKS: list[dict[str, Any]] = [
    {
        "id": "ai_request",
        "name": "AI Request",
        "description": "Ask for feedback on the last few sessions",
        "params": [
            {"key": "prompt", "name": "Prompt", "type": "textarea", "default": "How am I doing?"},
            {
                "key": "tone",
                "name": "Tone",
                "type": "select",
                "default": "kind",
                "options": ["kind", "blunt"],
            },
        ],
        "config": None,
    },
    {
        "id": "daily_digest",
        "name": "Daily Digest",
        "params": None,
        "config": {
            "enabled": True,
            "trigger": "scheduled",
            "first_run": "08:00",
            "last_run": "20:00",
            "frequency": "1h",
            "params": {},
        },
    },
]

SEED_RESULTS: list[dict[str, Any]] = [
    {"id": "r1", "hook_id": "ai_request", "content": "Keep going", "read": False, "created": "2026-10-18T09:00:00Z"},
    {"id": "r2", "hook_id": "daily_digest", "content": "3 sessions", "read": False, "created": "2026-10-18T10:00:00Z"},
    {"id": "r0", "hook_id": "ai_request", "content": "Good start", "read": True, "created": "2026-10-17T18:00:00Z"},
]

SEED_HISTORY: list[dict[str, Any]] = [
    {"timestamp": "2026-10-18T08:00:00Z", "duration": 1500},
    {"timestamp": "2026-10-17T14:30:00Z", "duration": 3000},
]


@dataclass
class FakeCoachState:
    hooks: list[dict[str, Any]] = field(default_factory=list)
    results: list[dict[str, Any]] = field(default_factory=list)
    history: list[dict[str, Any]] = field(default_factory=list)
    contexts: dict[str, str] = field(default_factory=dict)
    healthy: bool = True
    fail_hooks: bool = False
    reject_saves: bool = False
    fail_triggers: set[str] = field(default_factory=set)
    gate: Optional[asyncio.Event] = None

    saved: list[tuple[str, dict]] = field(default_factory=list)
    triggered: list[str] = field(default_factory=list)
    read_calls: list[str] = field(default_factory=list)
    history_days: list[int] = field(default_factory=list)

    @classmethod
    def seeded(cls) -> "FakeCoachState":
        return cls(
            hooks=copy.deepcopy(SEED_HOOKS),
            results=copy.deepcopy(SEED_RESULTS),
            history=copy.deepcopy(SEED_HISTORY),
            contexts={"ai_request": "Last 7 days: 12 sessions, 5h total"},
        )

    def hook(self, hook_id: str) -> Optional[dict]:
        return next((h for h in self.hooks if h["id"] == hook_id), None)


def create_fake_coach(state: FakeCoachState) -> FastAPI:
    app = FastAPI()

    async def _hold():
        if state.gate is not None:
            await state.gate.wait()

    @app.get("/health")
    async def health():
        if not state.healthy:
            return PlainTextResponse("degraded", status_code=503)
        return {"status": "ok"}

    @app.get("/history")
    async def history(days: int = 7):
        state.history_days.append(days)
        return state.history

    @app.get("/hooks")
    async def list_hooks():
        if state.fail_hooks:
            return PlainTextResponse("hook store unavailable", status_code=500)
        return state.hooks

    @app.put("/hooks/{hook_id}")
    async def update_hook(hook_id: str, request: Request):
        body = await request.json()
        await _hold()
        hook = state.hook(hook_id)
        if hook is None:
            return PlainTextResponse("hook not found", status_code=404)
        if state.reject_saves:
            return PlainTextResponse("rejected by server", status_code=400)
        state.saved.append((hook_id, body))
        hook["config"] = body
        return {"status": "ok"}

    @app.post("/hooks/{hook_id}/trigger")
    async def trigger_hook(hook_id: str):
        await _hold()
        if state.hook(hook_id) is None:
            return PlainTextResponse("hook not found", status_code=404)
        if hook_id in state.fail_triggers:
            return PlainTextResponse("boom", status_code=500)
        state.triggered.append(hook_id)
        return {"status": "triggered"}

    @app.get("/hooks/{hook_id}/context")
    async def hook_context(hook_id: str):
        if state.hook(hook_id) is None:
            return PlainTextResponse("hook not found", status_code=404)
        return {"context": state.contexts.get(hook_id, "")}

    @app.get("/hook-results")
    async def hook_results():
        return state.results

    @app.post("/hook-results/{result_id}/read")
    async def mark_read(result_id: str):
        result = next((r for r in state.results if r["id"] == result_id), None)
        if result is None:
            return PlainTextResponse("result not found", status_code=404)
        state.read_calls.append(result_id)
        result["read"] = True
        return JSONResponse({"status": "ok"})

    return app


def fake_client(state: FakeCoachState) -> CoachClient:
    transport = httpx.ASGITransport(app=create_fake_coach(state))
    return CoachClient(BASE_URL, transport=transport)


async def settle(rounds: int = 10) -> None:
    """Let background tasks run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)
