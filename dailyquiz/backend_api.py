from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .backend import BackendError, LocalBackend
from .db import get_session
from .schemas import BackendCall, Winner
from .security import require_admin

router = APIRouter(prefix="/backend")

async def dispatch(b: LocalBackend, action: str, p: dict) -> dict:
    if action == "getEntries":
        entries = await b.get_entries(int(p["dayIndex"]))
        return {"entries": [e.model_dump(mode="json") for e in entries]}
    if action == "addEntry":
        return await b.add_entry(int(p["dayIndex"]), str(p["name"]), str(p.get("ip") or "0.0.0.0"))
    if action == "getWinner":
        w = await b.get_winner(int(p["dayIndex"]))
        return {"winner": w.model_dump(mode="json") if w else None}
    if action == "setWinner":
        return await b.set_winner(int(p["dayIndex"]), Winner.model_validate(p["winner"]))
    if action == "getWinnersArchive":
        archive = await b.get_winners_archive(int(p["totalDays"]))
        return {"archive": [x.model_dump(mode="json") for x in archive]}
    raise HTTPException(status_code=400, detail=f"unknown action {action!r}")

@router.post("")
async def backend_action(
    call: BackendCall,
    _: None = Depends(require_admin),
    db: Session = Depends(get_session),
):
    # the RemoteBackend of another deployment talks to this
    try:
        return await dispatch(LocalBackend(db), call.action, call.payload)
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="bad payload")
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))
