import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

import httpx
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings
from .models import EntryRow, WinnerRow
from .schemas import ArchiveItem, Entry, Winner

log = logging.getLogger(__name__)


class BackendError(Exception):
    pass


class Backend(Protocol):
    async def get_entries(self, day_index: int) -> list[Entry]: ...
    async def add_entry(self, day_index: int, name: str, ip: str) -> dict: ...
    async def get_winner(self, day_index: int) -> Optional[Winner]: ...
    async def set_winner(self, day_index: int, winner: Winner) -> dict: ...
    async def get_winners_archive(self, total_days: int) -> list[ArchiveItem]: ...


def _aware(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes even for timezone=True columns
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class LocalBackend:
    """Entries and winners in the service's own database."""

    def __init__(self, db: Session):
        self.db = db

    async def get_entries(self, day_index):
        rows = self.db.execute(
            select(EntryRow).filter_by(day_index=day_index).order_by(EntryRow.id)
        ).scalars()
        return [Entry(name=r.name, ip=r.ip, ts=_aware(r.created_at)) for r in rows]

    async def add_entry(self, day_index, name, ip):
        row = EntryRow(day_index=day_index, name=name.strip(), ip=ip, created_at=datetime.now(timezone.utc))
        self.db.add(row)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BackendError(f"addEntry failed: {e}") from e
        return {"ok": True}

    async def get_winner(self, day_index):
        row = self.db.execute(select(WinnerRow).filter_by(day_index=day_index)).scalar_one_or_none()
        if not row:
            return None
        return Winner(name=row.name, ts=_aware(row.selected_at))

    async def set_winner(self, day_index, winner):
        self.db.add(WinnerRow(day_index=day_index, name=winner.name, selected_at=winner.ts))
        try:
            self.db.commit()
        except IntegrityError:
            # someone else drew first, theirs stands
            self.db.rollback()
            log.info("winner for day %s already set, keeping the stored one", day_index)
            return {"ok": True, "existing": True}
        return {"ok": True}

    async def get_winners_archive(self, total_days):
        rows = self.db.execute(
            select(WinnerRow)
            .where(WinnerRow.day_index >= 0, WinnerRow.day_index < total_days)
            .order_by(WinnerRow.day_index)
        ).scalars()
        return [
            ArchiveItem(day_index=r.day_index, winner=Winner(name=r.name, ts=_aware(r.selected_at)))
            for r in rows
        ]


class RemoteBackend:
    """Same contract over HTTP: POST {action, payload} to a single endpoint."""

    def __init__(self, endpoint: str, token: str = "", client: httpx.AsyncClient | None = None):
        self.endpoint = endpoint
        self.token = token
        self.client = client

    async def call(self, action: str, payload: dict) -> dict:
        if not self.endpoint:
            raise BackendError("Backend endpoint not configured.")
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        body = {"action": action, "payload": payload}
        try:
            if self.client is None:
                async with httpx.AsyncClient(timeout=30) as c:
                    r = await c.post(self.endpoint, json=body, headers=headers)
            else:
                r = await self.client.post(self.endpoint, json=body, headers=headers)
            r.raise_for_status()
            return r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BackendError(f"{action} failed: {e}") from e

    async def get_entries(self, day_index):
        r = await self.call("getEntries", {"dayIndex": day_index})
        return [Entry.model_validate(e) for e in r.get("entries") or []]

    async def add_entry(self, day_index, name, ip):
        return await self.call("addEntry", {"dayIndex": day_index, "name": name, "ip": ip})

    async def get_winner(self, day_index):
        r = await self.call("getWinner", {"dayIndex": day_index})
        w = r.get("winner")
        return Winner.model_validate(w) if w else None

    async def set_winner(self, day_index, winner):
        return await self.call("setWinner", {"dayIndex": day_index, "winner": winner.model_dump(mode="json")})

    async def get_winners_archive(self, total_days):
        r = await self.call("getWinnersArchive", {"totalDays": total_days})
        return [ArchiveItem.model_validate(x) for x in r.get("archive") or []]


def make_backend_factory(cfg: Settings) -> Callable[[Session], Backend]:
    """Pick the adapter once, at startup."""
    if cfg.BACKEND == "remote":
        endpoint, token = cfg.REMOTE_BACKEND_URL, cfg.REMOTE_BACKEND_TOKEN
        return lambda db: RemoteBackend(endpoint, token)
    if cfg.BACKEND != "local":
        raise ValueError(f"unknown BACKEND {cfg.BACKEND!r}, expected 'local' or 'remote'")
    return LocalBackend
