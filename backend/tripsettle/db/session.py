"""
Database engine and per-request sessions.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from tripsettle.core.config import settings
from tripsettle.db.base import Base


def engine_options(url: str) -> dict:
    """SQLite needs cross-thread access for the threadpool; server databases get pool health checks."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Yield a session for one request; always closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables for the registered models."""
    Base.metadata.create_all(bind=engine)
