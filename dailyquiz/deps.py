"""FastAPI dependencies wiring the controller to config, storage and the clock."""
import uuid

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from .attempts import AttemptStore, SqlAttemptStore
from .backend import Backend, make_backend_factory
from .config import QuizConfig, settings
from .controller import DailyWindowController
from .db import get_session
from .ipinfo import Visitor, resolve_visitor_ip
from .questions import load_questions
from .schemas import Question
from .utils_time import Clock, OverrideStore

# chosen once, at import
backend_factory = make_backend_factory(settings)

DEVICE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

def get_config() -> QuizConfig:
    return settings.quiz_config()

def get_override_store() -> OverrideStore:
    return OverrideStore(settings.DEV_OVERRIDE_PATH)

def get_clock(overrides: OverrideStore = Depends(get_override_store)) -> Clock:
    return Clock(settings.QUIZ_TZ, overrides=overrides if settings.DEV_MODE else None)

def get_backend(db: Session = Depends(get_session)) -> Backend:
    return backend_factory(db)

def get_attempt_store(db: Session = Depends(get_session)) -> AttemptStore:
    return SqlAttemptStore(db)

def get_questions() -> list[Question]:
    return load_questions(settings.QUESTIONS_PATH)

def ensure_device_id(request: Request, response: Response) -> str:
    device_id = request.cookies.get(settings.DEVICE_COOKIE)
    if device_id:
        return device_id
    device_id = uuid.uuid4().hex
    response.set_cookie(
        key=settings.DEVICE_COOKIE,
        value=device_id,
        max_age=DEVICE_COOKIE_MAX_AGE,
        samesite="lax",
        httponly=True,
    )
    return device_id

async def get_visitor(request: Request, device_id: str = Depends(ensure_device_id)) -> Visitor:
    ip = await resolve_visitor_ip(request, settings.IP_SOURCE, settings.IP_LOOKUP_URL)
    return Visitor(ip=ip, device_id=device_id)

def get_controller(
    config: QuizConfig = Depends(get_config),
    backend: Backend = Depends(get_backend),
    clock: Clock = Depends(get_clock),
    attempts: AttemptStore = Depends(get_attempt_store),
    questions: list[Question] = Depends(get_questions),
) -> DailyWindowController:
    return DailyWindowController(config, backend, clock, attempts, questions)
