"""
Database connection (SQLAlchemy)

PostgreSQL in production, SQLite for local development and tests.

Author: TechTots
Updated: 2025-10-17
"""
import time
from datetime import datetime, timezone

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connection before use
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, used for every DateTime column"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    """
    FastAPI dependency that yields a SQLAlchemy session

    Usage:
        @router.get("/items")
        async def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables registered on Base"""
    # Importing the models package registers every table on Base.metadata
    from storefront import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def check_connection() -> float:
    """
    Run SELECT 1 against the database

    Returns:
        Latency in milliseconds
    """
    start = time.time()
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return round((time.time() - start) * 1000, 2)
