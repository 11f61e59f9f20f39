from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from .config import settings, QuizConfig
from .db import engine
from . import models
from .backend_api import router as backend_router
from .dev import router as dev_router
from .classify import in_range
from .controller import DailyWindowController
from .deps import get_config, get_controller, get_visitor
from .ipinfo import Visitor
from .logging_config import configure_logging
from .render import render_page, render_answer, render_entry, render_archive, NO_ENTRIES_TEXT
from .schemas import AnswerIn, EntryIn
from .security import require_admin

configure_logging(settings.LOG_LEVEL)
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="Daily Window Quiz API")
app.include_router(backend_router)
app.include_router(dev_router)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

@app.get("/health")
async def health():
    return {"status": "ok"}

@app.get("/today")
async def today(
    visitor: Visitor = Depends(get_visitor),
    ctl: DailyWindowController = Depends(get_controller),
    cfg: QuizConfig = Depends(get_config),
):
    view = await ctl.load_page(visitor)
    return render_page(view, cfg)

@app.post("/today/answer")
async def answer(
    body: AnswerIn,
    visitor: Visitor = Depends(get_visitor),
    ctl: DailyWindowController = Depends(get_controller),
    cfg: QuizConfig = Depends(get_config),
):
    try:
        result = await ctl.answer(visitor, body.choice)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return render_answer(result, cfg)

@app.post("/today/entry")
async def entry(
    body: EntryIn,
    visitor: Visitor = Depends(get_visitor),
    ctl: DailyWindowController = Depends(get_controller),
    cfg: QuizConfig = Depends(get_config),
):
    result = await ctl.submit_entry(visitor, body.day, body.name)
    return render_entry(result, cfg)

@app.get("/archive")
async def archive(ctl: DailyWindowController = Depends(get_controller)):
    return {"archive": render_archive(await ctl.archive())}

@app.get("/admin/entries")
async def admin_entries(
    day: int,
    _: None = Depends(require_admin),
    ctl: DailyWindowController = Depends(get_controller),
):
    entries = await ctl.backend.get_entries(day)
    return {"dayIndex": day, "entries": [e.model_dump(mode="json") for e in entries]}

@app.post("/admin/draw")
async def admin_draw(
    day: int,
    _: None = Depends(require_admin),
    ctl: DailyWindowController = Depends(get_controller),
    cfg: QuizConfig = Depends(get_config),
):
    if not in_range(day, cfg.total_days):
        raise HTTPException(status_code=400, detail=f"day must be 0-{cfg.total_days - 1}")
    # only once that day's window has closed
    now, today_idx = ctl.current()
    if day > today_idx or (day == today_idx and now.hour < cfg.close_hour):
        raise HTTPException(status_code=409, detail=f"day {day} is still open for entries")
    # never re-roll
    existing = await ctl.backend.get_winner(day)
    if existing:
        raise HTTPException(status_code=409, detail=f"day {day} already has a winner")
    winner = await ctl.draw(day)
    if winner is None:
        return {"ok": True, "dayIndex": day, "winner": None, "notice": NO_ENTRIES_TEXT}
    return {"ok": True, "dayIndex": day, "winner": winner.name}
