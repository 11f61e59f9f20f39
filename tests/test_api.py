import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from dailyquiz.config import settings
from dailyquiz.db import get_session
from dailyquiz.deps import get_clock
from dailyquiz.main import app

from conftest import fixed_clock, london

ADMIN = {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}


@pytest.fixture
def client(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def _session():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = _session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def at(client):
    def _set(*args):
        app.dependency_overrides[get_clock] = lambda: fixed_clock(london(*args))
    return _set


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_today_sets_device_cookie(client, at):
    at(2024, 12, 3, 12, 0)
    r = client.get("/today")
    assert r.status_code == 200
    assert settings.DEVICE_COOKIE in r.cookies
    body = r.json()
    assert body["state"] == "open"
    assert len(body["question"]["choices"]) == 4
    assert body["windowLabel"] == "Today: 10:00–16:00 (Europe/London)"

def test_answer_entry_and_draw(client, at, questions):
    at(2024, 12, 3, 12, 0)
    client.get("/today")
    r = client.post("/today/answer", json={"choice": questions[2].answer_index})
    assert r.json()["feedback"] == "Correct. Nice work."

    again = client.get("/today").json()
    assert again["question"]["choices"] == []

    assert client.post("/today/entry", json={"day": 2, "name": " "}).json()["status"] == "empty_name"
    assert client.post("/today/entry", json={"day": 2, "name": "Alice"}).json()["status"] == "saved"

    entries = client.get("/admin/entries", params={"day": 2}, headers=ADMIN).json()["entries"]
    assert [e["name"] for e in entries] == ["Alice"]

    at(2024, 12, 3, 17, 0)
    assert client.get("/today").json()["winner"] == "Alice"
    assert client.get("/archive").json()["archive"] == [{"dayIndex": 2, "label": "Day 3", "name": "Alice"}]

def test_bad_choice(client, at):
    at(2024, 12, 3, 12, 0)
    assert client.post("/today/answer", json={"choice": 9}).status_code == 400

def test_admin_requires_token(client):
    assert client.get("/admin/entries", params={"day": 0}).status_code == 401
    assert client.post("/admin/draw", params={"day": 0}).status_code == 401

def test_admin_draw_never_rerolls(client):
    r = client.post("/admin/draw", params={"day": 1}, headers=ADMIN)
    assert r.json()["winner"] is None
    call = {"action": "addEntry", "payload": {"dayIndex": 1, "name": "Bob", "ip": "1.2.3.4"}}
    assert client.post("/backend", json=call, headers=ADMIN).json() == {"ok": True}
    assert client.post("/admin/draw", params={"day": 1}, headers=ADMIN).json()["winner"] == "Bob"
    assert client.post("/admin/draw", params={"day": 1}, headers=ADMIN).status_code == 409
    assert client.post("/admin/draw", params={"day": 99}, headers=ADMIN).status_code == 400

def test_backend_endpoint(client):
    set_call = {"action": "setWinner", "payload": {"dayIndex": 4, "winner": {"name": "Dee", "ts": "2024-12-05T16:01:00Z"}}}
    assert client.post("/backend", json=set_call, headers=ADMIN).status_code == 200
    got = client.post("/backend", json={"action": "getWinner", "payload": {"dayIndex": 4}}, headers=ADMIN).json()
    assert got["winner"]["name"] == "Dee"
    archive = client.post("/backend", json={"action": "getWinnersArchive", "payload": {"totalDays": 24}}, headers=ADMIN).json()
    assert archive["archive"][0]["day_index"] == 4
    assert client.post("/backend", json={"action": "getEntries", "payload": {}}, headers=ADMIN).status_code == 400
    assert client.post("/backend", json={"action": "dropTables"}, headers=ADMIN).status_code == 400
    assert client.post("/backend", json={"action": "getWinner", "payload": {"dayIndex": 4}}).status_code == 401

def test_dev_routes_hidden_in_production(client):
    assert client.get("/dev/now").status_code == 404
    assert client.put("/dev/override", json={"date": "2024-12-03"}).status_code == 404

def test_dev_override_drives_today(client, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "DEV_MODE", True)
    monkeypatch.setattr(settings, "DEV_OVERRIDE_PATH", tmp_path / "override.json")

    r = client.put("/dev/override", json={"date": "2024-12-03", "time": "09:00"})
    assert r.json()["override"] == {"date": "2024-12-03", "time": "09:00"}
    assert client.get("/today").json()["state"] == "waiting"

    r = client.post("/dev/override/nudge", params={"hours": 1})
    assert r.json()["now"] == "2024-12-03T10:00:00"
    assert client.get("/today").json()["state"] == "open"

    assert client.put("/dev/override", json={"date": "03/12/2024"}).status_code == 400
    assert client.delete("/dev/override").json()["override"] is None

def test_admin_draw_waits_for_close(client, at):
    at(2024, 12, 3, 12, 0)
    assert client.post("/admin/draw", params={"day": 2}, headers=ADMIN).status_code == 409
    assert client.post("/admin/draw", params={"day": 3}, headers=ADMIN).status_code == 409
    assert client.post("/admin/draw", params={"day": 1}, headers=ADMIN).status_code == 200
    assert client.get("/today").json()["state"] == "open"
    at(2024, 12, 3, 16, 0)
    assert client.post("/admin/draw", params={"day": 2}, headers=ADMIN).status_code == 200
