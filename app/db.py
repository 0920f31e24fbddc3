# app/db.py
import logging
from pathlib import Path
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from .config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_DIR.mkdir(parents=True, exist_ok=True)
DB_PATH = DATA_DIR / "app.db"

def _pg_url(url: str) -> str:
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    elif url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url

def _sqlite_engine(url: str):
    # in-memory databases must share one connection across threads
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, connect_args={"check_same_thread": False}, echo=False)

def _try_pg_engine(url: str):
    try:
        eng = create_engine(_pg_url(url), pool_pre_ping=True, pool_size=10)
        with eng.connect() as conn:
            conn.execute(text("SELECT 1"))
        return eng
    except Exception as e:
        logger.error("Postgres connect failed: %r", e)
        if not settings.db_allow_sqlite_fallback:
            raise
        return None

def _make_engine():
    url = settings.database_url
    if url.startswith("sqlite"):
        return _sqlite_engine(url)
    if url:
        eng = _try_pg_engine(url)
        if eng is not None:
            return eng
    logger.warning("Using SQLite database at %s", DB_PATH)
    return _sqlite_engine(f"sqlite:///{DB_PATH}")

engine = _make_engine()

def init_db():
    from . import models  # noqa: F401  register tables
    SQLModel.metadata.create_all(engine)

def ping_db() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))

def get_session():
    with Session(engine) as session:
        yield session
