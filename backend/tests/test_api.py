import json

from fastapi.testclient import TestClient

from api.server import app

client = TestClient(app)


def new_session(**body):
    resp = client.post("/api/gate/session", json=body or None)
    assert resp.status_code == 200
    return resp.json()["session_id"]


def test_ping():
    resp = client.get("/api/ping")
    assert resp.status_code == 200
    data = resp.json()
    assert data.get("ok") is True
    assert "sessions" in data


def test_session_unlock_flow():
    sid = new_session(seed=4)

    state = client.get(f"/api/gate/{sid}").json()
    assert state["state"]["progress"] == 0.0
    assert state["state"]["phase"] == "gated"
    assert state["status_text"] == "LOCKED"

    t = 0.0
    unlocked_at = None
    for i in range(80):
        t += 95.0
        resp = client.post(
            f"/api/gate/{sid}/input", json={"kind": "wheel", "delta_y": 100.0, "timestamp": t}
        )
        assert resp.status_code == 200
        body = resp.json()
        if not body["handled"]:
            assert body["suppress_default"] is False
            continue
        assert body["suppress_default"] is True
        assert 0.0 <= body["effects"]["progress"] <= 100.0
        if body["effects"]["unlocked"] and unlocked_at is None:
            unlocked_at = i
            messages = [e["message"] for e in body["effects"]["feedback"]]
            assert messages[0] == "Cipher alignment reached threshold."
    assert unlocked_at is not None

    resp = client.post(f"/api/gate/{sid}/tick", json={"elapsed_ms": 700.0})
    reveal = resp.json()["effects"]["reveal"]
    assert reveal["main_visible"] is True
    assert reveal["toast"]["title"] == "ACCESS GRANTED"

    state = client.get(f"/api/gate/{sid}").json()
    assert state["revealed"] is True
    assert state["state"]["phase"] == "unlocked"
    assert state["toasts"][0]["title"] == "ACCESS GRANTED"

    log = client.get(f"/api/gate/{sid}/log?n=3").json()
    assert log["count"] == 3
    assert log["lines"][-1].endswith("OK Opening secure viewport…")


def test_key_input_and_unhandled_key():
    sid = new_session()
    resp = client.post(
        f"/api/gate/{sid}/input", json={"kind": "key", "key": "PageDown", "timestamp": 95.0}
    )
    assert resp.json()["handled"] is True
    resp = client.post(f"/api/gate/{sid}/input", json={"kind": "key", "key": "x", "timestamp": 190.0})
    assert resp.json() == {"handled": False, "suppress_default": False, "effects": None}


def test_bad_inputs_rejected():
    sid = new_session()
    resp = client.post(f"/api/gate/{sid}/input", json={"kind": "touch", "timestamp": 1.0})
    assert resp.status_code == 400
    resp = client.post(f"/api/gate/{sid}/input", json={"kind": "wheel", "timestamp": 1.0})
    assert resp.status_code == 400
    resp = client.post(f"/api/gate/{sid}/input", json={"kind": "key", "timestamp": 1.0})
    assert resp.status_code == 400
    resp = client.post(f"/api/gate/{sid}/tick", json={"elapsed_ms": -5})
    assert resp.status_code == 422


def test_unknown_session_is_404():
    assert client.get("/api/gate/nope").status_code == 404
    assert client.post("/api/gate/nope/tick", json={"elapsed_ms": 1}).status_code == 404
    assert client.delete("/api/gate/nope").status_code == 404


def test_liveness_ticks_and_decorations():
    sid = new_session(seed=2, width=320, height=200)
    effects = client.post(f"/api/gate/{sid}/tick", json={"elapsed_ms": 900.0}).json()["effects"]
    assert effects["feedback"][0]["message"] == "Establishing secure lane…"
    assert 8 <= effects["hud_ping_ms"] <= 31

    body = client.post(
        f"/api/gate/{sid}/input", json={"kind": "wheel", "delta_y": 120.0, "timestamp": 1000.0}
    ).json()
    assert body["effects"]["burst"] is not None
    sprites = client.get(f"/api/gate/{sid}/sprites").json()
    assert sprites["bursts"] == 1
    assert len(sprites["sprites"]) >= 6

    backdrop = client.get(f"/api/gate/{sid}/backdrop").json()
    assert backdrop["matrix"]["cols"] == 20


def test_recorded_session(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    resp = client.post("/api/gate/session", json={"record": True})
    data = resp.json()
    sid, run_id = data["session_id"], data["run_id"]
    client.post(f"/api/gate/{sid}/input", json={"kind": "wheel", "delta_y": 90.0, "timestamp": 95.0})
    assert client.delete(f"/api/gate/{sid}").status_code == 200

    records = tmp_path / "logs" / "flight_recorder" / run_id / "records.ndjson"
    lines = [l for l in records.read_text(encoding="utf-8").splitlines() if l.strip()]
    assert json.loads(lines[0])["_meta"] is True
    assert json.loads(lines[1])["kind"] == "input"


def test_projects_and_focus():
    data = client.get("/api/projects", params={"filter": "tools"}).json()
    slugs = [p["slug"] for p in data["projects"]]
    assert slugs == ["trace-profiler", "shader-lab"]

    focus = client.get("/api/projects/voxel-engine/focus").json()
    assert focus["dossier"]["complexity"] == "High"
    assert focus["summary"].startswith("Voxel Engine\n\n")
    assert client.get("/api/projects/missing/focus").status_code == 404


def test_palette():
    data = client.get("/api/palette", params={"q": "theme"}).json()
    assert data["commands"][0]["label"] == "Toggle Mode"
    assert data["commands"][0]["score"] == 9


def test_palette_targets():
    data = client.get("/api/palette", params={"q": "first project"}).json()
    assert data["commands"][0]["target"] == "project:voxel-engine"


def test_oversized_viewport_rejected():
    resp = client.post("/api/gate/session", json={"width": 10**12, "height": 10})
    assert resp.status_code == 422
    resp = client.post("/api/gate/session", json={"dpr": 50})
    assert resp.status_code == 422
    resp = client.post("/api/gate/session", json={"width": 7680, "height": 4320, "dpr": 4})
    assert resp.status_code == 200
    client.delete(f"/api/gate/{resp.json()['session_id']}")
