"""Engine and session factory for the activity store, plus the Alembic runner."""
import logging
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import get_settings


logger = logging.getLogger(__name__)

settings = get_settings()


def engine_options(database_url: str) -> dict[str, Any]:
    """Backend-specific ``create_engine`` keyword arguments.

    SQLite connections are used from both the event loop and FastAPI's worker
    threads; server databases get pre-ping so stale pooled connections are
    replaced instead of failing an activity fetch.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    **engine_options(settings.database_url),
)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    """FastAPI dependency yielding a database session."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _alembic_config() -> Config:
    root = Path(__file__).resolve().parent.parent
    cfg = Config(str(root / "alembic.ini"))
    cfg.set_main_option("script_location", str(root / "migrations"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


def run_migrations(target_revision: str = "head") -> None:
    """Bring the ``activities`` schema up to ``target_revision``."""
    logger.info("Applying migrations up to %s", target_revision)
    command.upgrade(_alembic_config(), target_revision)
