from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings

def engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kw = {"connect_args": {"check_same_thread": False}}
    # one shared connection, otherwise every checkout gets its own empty database
    if url in ("sqlite://", "sqlite:///:memory:"):
        kw["poolclass"] = StaticPool
    return kw

engine = create_engine(settings.DATABASE_URL, future=True, **engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

def get_session() -> Iterator[Session]:
    """
    FastAPI dependency: yields a DB session and closes it afterwards.
    NOTE: Do NOT decorate this with @contextmanager. FastAPI expects a generator.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
