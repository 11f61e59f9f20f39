"""Developer time override. Every route 404s unless DEV_MODE is on."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from .deps import get_clock, get_override_store
from .schemas import OverrideIn
from .security import require_dev_mode
from .utils_time import Clock, OverrideStore, TimeOverride, nudge

log = logging.getLogger(__name__)

router = APIRouter(prefix="/dev", dependencies=[Depends(require_dev_mode)])

def _state(store: OverrideStore, clock: Clock) -> dict:
    ov = store.load()
    return {
        "override": ov.to_dict() if ov else None,
        "now": clock.now().isoformat(),
        "realNow": clock.real_now().isoformat(),
    }

@router.get("/now")
def dev_now(clock: Clock = Depends(get_clock), store: OverrideStore = Depends(get_override_store)):
    return _state(store, clock)

@router.get("/override")
def get_override(clock: Clock = Depends(get_clock), store: OverrideStore = Depends(get_override_store)):
    return _state(store, clock)

@router.put("/override")
def put_override(
    body: OverrideIn,
    clock: Clock = Depends(get_clock),
    store: OverrideStore = Depends(get_override_store),
):
    try:
        ov = TimeOverride.from_dict(body.model_dump())
    except ValueError:
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD and time HH:MM")
    # nothing given means clear, like the panel's apply with empty fields
    store.save(None if ov.is_empty() else ov)
    return _state(store, clock)

@router.delete("/override")
def delete_override(clock: Clock = Depends(get_clock), store: OverrideStore = Depends(get_override_store)):
    store.clear()
    return _state(store, clock)

@router.post("/override/nudge")
def nudge_override(
    hours: int = 0,
    days: int = 0,
    clock: Clock = Depends(get_clock),
    store: OverrideStore = Depends(get_override_store),
):
    store.save(nudge(clock, hours=hours, days=days))
    return _state(store, clock)
