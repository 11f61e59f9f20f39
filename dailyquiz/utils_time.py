from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional
import zoneinfo

log = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimeOverride:
    date: Optional[date] = None
    time: Optional[time] = None

    @classmethod
    def from_dict(cls, raw: dict) -> "TimeOverride":
        d = raw.get("date") or None
        t = raw.get("time") or None
        return cls(
            date=date.fromisoformat(d) if d else None,
            time=time.fromisoformat(t) if t else None,
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat() if self.date else None,
            "time": self.time.strftime("%H:%M") if self.time else None,
        }

    def is_empty(self) -> bool:
        return self.date is None and self.time is None


class OverrideStore:
    """Developer time override kept in a local JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[TimeOverride]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            log.warning("ignoring unreadable override file %s", self.path)
            return None
        if not isinstance(raw, dict):
            return None
        try:
            ov = TimeOverride.from_dict(raw)
        except ValueError:
            log.warning("ignoring malformed override in %s", self.path)
            return None
        return None if ov.is_empty() else ov

    def save(self, ov: Optional[TimeOverride]) -> None:
        if ov is None or ov.is_empty():
            self.clear()
            return
        self.path.write_text(json.dumps(ov.to_dict()), encoding="utf-8")
        log.info("time override set to %s", ov.to_dict())

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        log.info("time override cleared")


class Clock:
    """
    Wall-clock "now" in the quiz timezone.

    Returns naive local datetimes: the real instant is projected into `tz` and
    the tzinfo dropped, so all later arithmetic runs on local wall-clock values.
    An override store is only attached in dev mode.
    """

    def __init__(self, tz: str, overrides: Optional[OverrideStore] = None,
                 source: Callable[[], datetime] = utc_now):
        self.tz = zoneinfo.ZoneInfo(tz)
        self.overrides = overrides
        self.source = source

    def real_now(self) -> datetime:
        return self.source().astimezone(self.tz).replace(tzinfo=None, microsecond=0)

    def now(self) -> datetime:
        local = self.real_now()
        ov = self.overrides.load() if self.overrides else None
        if ov is None:
            return local
        d = ov.date or local.date()
        t = ov.time or time(local.hour, local.minute)
        return datetime.combine(d, t.replace(second=0, microsecond=0))


def day_index_from_start(start: date, now: datetime) -> int:
    # floor of elapsed wall-clock time over one day, negative before the start
    return (now - datetime.combine(start, time(0, 0))) // ONE_DAY

def in_window(hour: int, open_hour: int, close_hour: int) -> bool:
    return open_hour <= hour < close_hour

def fmt_hour(hour: int) -> str:
    return f"{hour:02d}:00"

def fmt_range(open_hour: int, close_hour: int) -> tuple[str, str]:
    return fmt_hour(open_hour), fmt_hour(close_hour)

def nudge(clock: Clock, hours: int = 0, days: int = 0) -> TimeOverride:
    base = clock.now() + timedelta(hours=hours, days=days)
    return TimeOverride(date=base.date(), time=time(base.hour, base.minute))
