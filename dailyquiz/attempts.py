from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from .ipinfo import Visitor
from .models import MarkerRow

PREFIX = "dailyquiz"

class AttemptStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...


class MemoryAttemptStore:
    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class SqlAttemptStore:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, key: str) -> Optional[MarkerRow]:
        return self.db.execute(select(MarkerRow).filter_by(key=key)).scalar_one_or_none()

    def get(self, key):
        row = self._row(key)
        return row.value if row else None

    def set(self, key, value):
        row = self._row(key)
        if not row:
            row = MarkerRow(key=key)
        row.value = value
        self.db.add(row)
        self.db.commit()


def attempt_key(day_index: int, device_id: str, ip: str) -> str:
    return f"{PREFIX}:attempt:{day_index}:{device_id}:ip:{ip}"

def device_key(day_index: int, device_id: str) -> str:
    return f"{PREFIX}:attempt:{day_index}:{device_id}:device"

def visitor_keys(day_index: int, visitor: Visitor) -> list[str]:
    # markers belong to one device, other devices behind the same address are not affected
    keys = [device_key(day_index, visitor.device_id)]
    if visitor.has_ip:
        keys.insert(0, attempt_key(day_index, visitor.device_id, visitor.ip))
    return keys

def marker_outcome(store: AttemptStore, day_index: int, visitor: Visitor) -> Optional[str]:
    """Outcome recorded for this visitor on this day, from either marker."""
    for key in visitor_keys(day_index, visitor):
        value = store.get(key)
        if value:
            return value
    return None

def already_played(store: AttemptStore, day_index: int, visitor: Visitor) -> bool:
    return marker_outcome(store, day_index, visitor) is not None

def record_attempt(store: AttemptStore, day_index: int, visitor: Visitor, outcome: str) -> None:
    # both markers describe the same attempt, rewriting them is harmless
    for key in visitor_keys(day_index, visitor):
        store.set(key, outcome)
