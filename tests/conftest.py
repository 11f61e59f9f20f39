import os

# must be set before dailyquiz.config builds its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEV_MODE"] = "false"
os.environ["BACKEND"] = "local"

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dailyquiz.attempts import MemoryAttemptStore
from dailyquiz.backend import LocalBackend
from dailyquiz.config import QuizConfig, settings
from dailyquiz.controller import DailyWindowController
from dailyquiz.models import Base
from dailyquiz.questions import load_questions
from dailyquiz.utils_time import Clock

LONDON = ZoneInfo("Europe/London")


def london(*args) -> datetime:
    return datetime(*args, tzinfo=LONDON)


def fixed_clock(moment: datetime, tz: str = "Europe/London") -> Clock:
    return Clock(tz, source=lambda: moment)


@pytest.fixture
def cfg():
    return QuizConfig(start_date=date(2024, 12, 1), total_days=24, tz="Europe/London", open_hour=10, close_hour=16)


@pytest.fixture
def questions():
    return load_questions(settings.QUESTIONS_PATH)


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def backend(db):
    return LocalBackend(db)


@pytest.fixture
def attempts():
    return MemoryAttemptStore()


@pytest.fixture
def make_controller(cfg, backend, attempts, questions):
    def _make(moment: datetime, rng=None) -> DailyWindowController:
        return DailyWindowController(cfg, backend, fixed_clock(moment), attempts, questions, rng=rng)
    return _make
