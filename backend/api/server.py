"""
FastAPI server for gate sessions and the portfolio content behind the gate.
"""

import logging
import math
import os
import sys
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


from cipher_gate.flight_recorder import FlightRecorder  # noqa: E402
from cipher_gate.gate_config import load_gate_config  # noqa: E402
from cipher_gate.input_normalizer import KeyInput, WheelInput  # noqa: E402
from cipher_gate.palette import CommandPalette, resolve_target, score_command  # noqa: E402
from cipher_gate.projects import (  # noqa: E402
    build_dossier,
    filter_projects,
    load_projects,
    summary_text,
)
from cipher_gate.session import GateSession, SessionRegistry  # noqa: E402

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
PROJECTS_PATH = os.environ.get(
    "CIPHER_GATE_PROJECTS", str(REPO_ROOT / "config" / "projects.json")
)

# 8K UHD
MAX_VIEWPORT = (7680, 4320)

app = FastAPI(title="Cipher Gate API")


class SessionRequest(BaseModel):
    record: bool = False
    seed: Optional[int] = None
    width: int = Field(1280, gt=0, le=MAX_VIEWPORT[0])
    height: int = Field(720, gt=0, le=MAX_VIEWPORT[1])
    dpr: float = Field(1.0, gt=0, le=4.0)
    reduced_motion: bool = False


class InputRequest(BaseModel):
    kind: str  # "wheel" or "key"
    timestamp: float
    delta_y: Optional[float] = None
    key: Optional[str] = None


class TickRequest(BaseModel):
    elapsed_ms: float = Field(..., ge=0)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state
gate_config = load_gate_config(os.environ.get("CIPHER_GATE_CONFIG"))
sessions = SessionRegistry(
    max_sessions=int(os.environ.get("CIPHER_GATE_MAX_SESSIONS", "256"))
)


def _session(session_id: str) -> GateSession:
    try:
        return sessions.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")


def _require_finite(name: str, value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        raise HTTPException(status_code=400, detail=f"{name} must be a finite number")
    return value


def _session_payload(session: GateSession) -> dict:
    engine = session.engine
    return {
        "session_id": session.session_id,
        "state": engine.state.to_dict(),
        "hint": engine.hint,
        "status_text": engine.unlock.status_text,
        "revealed": session.revealed,
        "toasts": [t.to_dict() for t in session.notifications.toasts],
    }


@app.get("/")
async def root():
    return {"message": "Cipher Gate API"}


@app.get("/api/ping")
async def ping():
    return {"ok": True, "sessions": len(sessions)}


@app.post("/api/gate/session")
async def create_session(request: Optional[SessionRequest] = None):
    """Start a gate session."""
    request = request or SessionRequest()
    recorder = None
    if request.record:
        recorder = FlightRecorder()
    session = sessions.create(
        config=gate_config,
        recorder=recorder,
        seed=request.seed,
        viewport=(request.width, request.height),
        dpr=request.dpr,
        reduced_motion=request.reduced_motion,
    )
    payload = _session_payload(session)
    payload["run_id"] = recorder.run_id if recorder else None
    return payload


@app.get("/api/gate/{session_id}")
async def get_session(session_id: str):
    return _session_payload(_session(session_id))


@app.post("/api/gate/{session_id}/input")
async def submit_input(session_id: str, request: InputRequest):
    """Apply a wheel or key input to the gate."""
    session = _session(session_id)
    timestamp = _require_finite("timestamp", request.timestamp)
    if request.kind == "wheel":
        raw = WheelInput(_require_finite("delta_y", request.delta_y), timestamp)
    elif request.kind == "key":
        if not request.key:
            raise HTTPException(status_code=400, detail="key is required for key input")
        raw = KeyInput(request.key, timestamp)
    else:
        raise HTTPException(status_code=400, detail=f"Unsupported input kind: {request.kind}")

    normalized, effects = session.handle(raw)
    if effects is None:
        return {"handled": False, "suppress_default": False, "effects": None}
    return {
        "handled": True,
        "suppress_default": normalized.suppress_default,
        "effects": effects.to_dict(),
    }


@app.post("/api/gate/{session_id}/tick")
async def tick(session_id: str, request: TickRequest):
    session = _session(session_id)
    effects = session.tick(_require_finite("elapsed_ms", request.elapsed_ms))
    return {"effects": effects.to_dict()}


@app.get("/api/gate/{session_id}/log")
async def get_log(session_id: str, n: int = Query(50, ge=1, le=1000)):
    """Return the last n feedback lines, oldest first."""
    session = _session(session_id)
    entries = session.engine.log.last(n)
    return {
        "count": len(entries),
        "entries": [e.to_dict() for e in entries],
        "lines": [e.render() for e in entries],
    }


@app.get("/api/gate/{session_id}/sprites")
async def get_sprites(session_id: str):
    session = _session(session_id)
    return {"bursts": len(session.sprites.bursts), "sprites": session.sprites.frame()}


@app.get("/api/gate/{session_id}/backdrop")
async def get_backdrop(session_id: str):
    return _session(session_id).backdrop.snapshot()


@app.delete("/api/gate/{session_id}")
async def close_session(session_id: str):
    try:
        sessions.close(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Session closed", "session_id": session_id}


def _projects():
    try:
        return load_projects(PROJECTS_PATH)
    except FileNotFoundError:
        logger.warning("project catalog not found at %s", PROJECTS_PATH)
        return []


@app.get("/api/projects")
async def list_projects(active_filter: str = Query("all", alias="filter"), q: str = ""):
    cards = filter_projects(_projects(), active_filter, q)
    return {
        "filter": active_filter,
        "count": len(cards),
        "projects": [
            {"slug": c.slug, "title": c.title, "desc": c.desc, "tags": list(c.tags)}
            for c in cards
        ],
    }


@app.get("/api/projects/{slug}/focus")
async def focus_project(slug: str):
    for card in _projects():
        if card.slug == slug:
            return {"dossier": build_dossier(card).to_dict(), "summary": summary_text(card)}
    raise HTTPException(status_code=404, detail="Project not found")


@app.get("/api/palette")
async def palette(q: str = ""):
    items = CommandPalette().filter(q)
    slugs = [c.slug for c in _projects()]
    results: List[dict] = [
        {
            "label": c.label,
            "hint": c.hint,
            "target": resolve_target(c, slugs),
            "score": score_command(c, q),
        }
        for c in items
    ]
    return {"query": q, "commands": results}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
