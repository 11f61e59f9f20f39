import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from dailyquiz.backend import BackendError, LocalBackend, RemoteBackend, make_backend_factory
from dailyquiz.config import Settings
from dailyquiz.schemas import Winner


def test_local_entries(backend):
    async def go():
        await backend.add_entry(2, "  Alice ", "1.2.3.4")
        await backend.add_entry(2, "Bob", "5.6.7.8")
        await backend.add_entry(3, "Carol", "9.9.9.9")
        return await backend.get_entries(2), await backend.get_entries(7)

    day2, day7 = asyncio.run(go())
    assert [e.name for e in day2] == ["Alice", "Bob"]
    assert day2[0].ip == "1.2.3.4"
    assert day2[0].ts.tzinfo is not None
    assert day7 == []

def test_local_winner_first_write_wins(backend):
    async def go():
        assert await backend.get_winner(1) is None
        await backend.set_winner(1, Winner(name="Alice"))
        ack = await backend.set_winner(1, Winner(name="Bob"))
        return ack, await backend.get_winner(1)

    ack, winner = asyncio.run(go())
    assert ack["existing"] is True
    assert winner.name == "Alice"

def test_local_archive(backend):
    async def go():
        await backend.set_winner(5, Winner(name="Eve"))
        await backend.set_winner(0, Winner(name="Ann"))
        await backend.set_winner(30, Winner(name="Late"))
        return await backend.get_winners_archive(24)

    archive = asyncio.run(go())
    assert [(x.day_index, x.winner.name) for x in archive] == [(0, "Ann"), (5, "Eve")]


def _remote(handler) -> RemoteBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteBackend("https://backend.example/exec", token="s3cret", client=client)

def test_remote_sends_action_and_payload():
    calls = []

    def handler(request: httpx.Request):
        calls.append((request.headers.get("authorization"), json.loads(request.content)))
        body = json.loads(request.content)
        if body["action"] == "getEntries":
            return httpx.Response(200, json={"entries": [{"name": "Alice", "ip": "1.2.3.4", "ts": "2024-12-03T11:00:00Z"}]})
        if body["action"] == "getWinner":
            return httpx.Response(200, json={"winner": None})
        if body["action"] == "getWinnersArchive":
            return httpx.Response(200, json={"archive": [{"day_index": 1, "winner": {"name": "Bob", "ts": "2024-12-02T16:05:00Z"}}]})
        return httpx.Response(200, json={"ok": True})

    b = _remote(handler)

    async def go():
        entries = await b.get_entries(2)
        winner = await b.get_winner(2)
        archive = await b.get_winners_archive(24)
        await b.set_winner(2, Winner(name="Alice", ts=datetime(2024, 12, 3, 17, 0, tzinfo=timezone.utc)))
        await b.add_entry(2, "Alice", "1.2.3.4")
        return entries, winner, archive

    entries, winner, archive = asyncio.run(go())
    assert entries[0].name == "Alice"
    assert winner is None
    assert archive[0].winner.name == "Bob"
    assert calls[0] == ("Bearer s3cret", {"action": "getEntries", "payload": {"dayIndex": 2}})
    assert calls[3][1]["action"] == "setWinner"
    assert calls[3][1]["payload"]["winner"]["name"] == "Alice"
    assert calls[4][1] == {"action": "addEntry", "payload": {"dayIndex": 2, "name": "Alice", "ip": "1.2.3.4"}}

def test_remote_failure_raises_backend_error():
    b = _remote(lambda request: httpx.Response(500))
    with pytest.raises(BackendError):
        asyncio.run(b.add_entry(2, "Alice", "1.2.3.4"))

def test_remote_without_endpoint():
    with pytest.raises(BackendError, match="not configured"):
        asyncio.run(RemoteBackend("").get_winner(0))

def test_factory_picks_adapter_once(db):
    assert isinstance(make_backend_factory(Settings(BACKEND="local"))(db), LocalBackend)
    remote = make_backend_factory(Settings(BACKEND="remote", REMOTE_BACKEND_URL="https://x.example"))(db)
    assert isinstance(remote, RemoteBackend)
    assert remote.endpoint == "https://x.example"
    with pytest.raises(ValueError):
        make_backend_factory(Settings(BACKEND="sheets"))
