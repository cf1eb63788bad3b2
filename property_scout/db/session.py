"""Database engine and session factory."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from property_scout.config import settings
from property_scout.db.models import Base


def get_engine(db_url=None):
    """Create a SQLAlchemy engine for the configured database.

    Args:
        db_url: Optional database URL; uses settings.db_url if None

    Returns:
        SQLAlchemy engine
    """
    url = db_url or settings.db_url

    if url.startswith("postgresql://") or url.startswith("postgres://"):
        return create_engine(url, echo=False, pool_pre_ping=True)

    # File-backed SQLite needs its directory to exist
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=False)


_engine = None
_SessionLocal = None


def _get_default_engine():
    """Return the lazily-initialised default engine (singleton)."""
    global _engine
    if _engine is None:
        _engine = get_engine()
    return _engine


def get_session_factory(engine=None):
    """Return a session factory, the lazily-initialised default one if no engine is given."""
    global _SessionLocal
    if engine is not None:
        return sessionmaker(bind=engine)
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=_get_default_engine())
    return _SessionLocal


def init_db(engine=None) -> None:
    """Create all tables (useful for quick bootstrapping without Alembic)."""
    Base.metadata.create_all(bind=engine or _get_default_engine())


def reset_engine() -> None:
    """Dispose of the default engine so the next access reconnects."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
