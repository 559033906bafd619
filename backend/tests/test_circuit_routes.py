from fastapi.testclient import TestClient

from circuitlab.main import app

client = TestClient(app)


def _create(scene_kind="switch_bulb.v0", **options):
  r = client.post("/circuit/sessions", json={"scene_kind": scene_kind, "options": options})
  assert r.status_code == 200, r.text
  return r.json()


def test_health():
  r = client.get("/health")
  assert r.status_code == 200
  assert r.json()["status"] == "ok"


def test_list_scenes():
  r = client.get("/circuit/scenes")
  assert r.status_code == 200
  kinds = [item["kind"] for item in r.json()]
  assert "battery_box.v0" in kinds and "switch_bulb.v0" in kinds


def test_switch_lesson_round_trip():
  data = _create()
  sid = data["session_id"]
  assert data["evaluation"]["any_success"] is False
  assert data["scene"]["wires"] == []

  for a, b in [("battery.pos", "switch.front"), ("switch.rear", "bulb.t1"), ("bulb.t2", "battery.neg")]:
    r = client.post(f"/circuit/sessions/{sid}/wires", json={"terminal_a": a, "terminal_b": b})
    assert r.status_code == 200
  assert r.json()["wire_id"] == "wire-3"

  r = client.put(f"/circuit/sessions/{sid}/switches/switch", json={"closed": True})
  assert r.status_code == 200
  body = r.json()
  bulb = body["evaluation"]["loads"]["bulb"]
  assert bulb["energized"] is True
  assert bulb["intensity_tier"] == "single-source"
  assert bulb["controlled_by_switch"] is True
  assert body["evaluation"]["banner"] == "switch_controlled"
  assert body["banner_message"]

  r = client.post(f"/circuit/sessions/{sid}/switches/switch/toggle")
  assert r.json()["evaluation"]["any_success"] is False

  r = client.get(f"/circuit/sessions/{sid}")
  assert len(r.json()["scene"]["wires"]) == 3


def test_rejected_wire_maps_to_conflict():
  sid = _create()["session_id"]
  client.post(f"/circuit/sessions/{sid}/wires", json={"terminal_a": "battery.pos", "terminal_b": "bulb.t1"})

  r = client.post(f"/circuit/sessions/{sid}/wires", json={"terminal_a": "bulb.t2", "terminal_b": "battery.pos"})
  assert r.status_code == 409
  assert r.json()["detail"]["error"] == "OccupiedTerminal"

  r = client.post(f"/circuit/sessions/{sid}/wires", json={"terminal_a": "bulb.t2", "terminal_b": "bulb.t1"})
  assert r.status_code == 409
  assert r.json()["detail"]["error"] == "SameComponent"

  r = client.get(f"/circuit/sessions/{sid}")
  assert len(r.json()["scene"]["wires"]) == 1


def test_unknown_ids_map_to_not_found():
  sid = _create()["session_id"]

  r = client.post(f"/circuit/sessions/{sid}/wires", json={"terminal_a": "ghost.pos", "terminal_b": "bulb.t1"})
  assert r.status_code == 404
  assert r.json()["detail"]["error"] == "UnknownTerminal"

  r = client.delete(f"/circuit/sessions/{sid}/wires/wire-99")
  assert r.status_code == 404
  assert r.json()["detail"]["error"] == "UnknownWire"

  r = client.put(f"/circuit/sessions/{sid}/switches/bulb", json={"closed": True})
  assert r.status_code == 404
  assert r.json()["detail"]["error"] == "UnknownComponent"

  r = client.get("/circuit/sessions/does-not-exist")
  assert r.status_code == 404
  assert r.json()["detail"]["error"] == "SessionNotFound"


def test_malformed_terminal_maps_to_unknown_terminal():
  sid = _create()["session_id"]

  for terminal in ["batterypos", "bulb.", {"component_id": "", "key": "pos"}, {"key": "pos"}]:
    r = client.post(f"/circuit/sessions/{sid}/wires", json={"terminal_a": terminal, "terminal_b": "bulb.t1"})
    assert r.status_code == 404, terminal
    assert r.json()["detail"]["error"] == "UnknownTerminal"

  r = client.post(
    f"/circuit/sessions/{sid}/wires",
    json={"terminal_a": {"component_id": "battery", "key": "pos"}, "terminal_b": "bulb.t1"},
  )
  assert r.status_code == 200
  assert r.json()["scene"]["wires"][0]["a"] == {"component_id": "battery", "key": "pos"}


def test_unknown_scene_kind_is_bad_request():
  r = client.post("/circuit/sessions", json={"scene_kind": "ramp.block_v0"})
  assert r.status_code == 400
  assert r.json()["detail"]["error"] == "UnknownSceneKind"


def test_battery_box_session_reset_and_fixed_wires():
  data = _create("battery_box.v0")
  sid = data["session_id"]
  fixed_id = data["scene"]["wires"][0]["id"]
  assert data["scene"]["wires"][0]["fixed"] is True

  for cell in ("cell1", "cell2"):
    r = client.put(f"/circuit/sessions/{sid}/sources/{cell}", json={"installed": True, "orientation_valid": True})
    assert r.status_code == 200
  r = client.put(f"/circuit/sessions/{sid}/switches/switch", json={"closed": True})
  assert r.json()["evaluation"]["loads"]["bulb"]["intensity_tier"] == "series-sources"

  r = client.delete(f"/circuit/sessions/{sid}/wires/{fixed_id}")
  assert r.status_code == 409
  assert r.json()["detail"]["error"] == "FixedWire"

  r = client.post(f"/circuit/sessions/{sid}/reset")
  assert r.status_code == 200
  body = r.json()
  assert body["evaluation"]["any_success"] is False
  assert len(body["scene"]["wires"]) == 3


def test_delete_session():
  sid = _create()["session_id"]
  r = client.delete(f"/circuit/sessions/{sid}")
  assert r.status_code == 200
  assert r.json()["deleted"] is True
  assert client.get(f"/circuit/sessions/{sid}").status_code == 404
  assert client.delete(f"/circuit/sessions/{sid}").status_code == 404
