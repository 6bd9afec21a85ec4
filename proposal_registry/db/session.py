"""Engine and session factory for the proposals database."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from proposal_registry.core.config import Settings, get_settings
from proposal_registry.obs import instrument_sqlalchemy_engine


def build_engine(settings: Settings) -> Engine:
    """Create the engine for ``settings.database_url``, traced when tracing is on."""
    # SQLite connections are opened on one worker thread and used on another.
    is_sqlite = settings.database_url.startswith("sqlite")
    built = create_engine(
        settings.database_url,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )
    if settings.enable_tracing:
        instrument_sqlalchemy_engine(built)
    return built


engine = build_engine(get_settings())
SessionLocal = sessionmaker(bind=engine, autoflush=False)


@contextmanager
def get_session() -> Iterator[Session]:
    """Session for scripts: commits on success, rolls back and re-raises on error."""
    with SessionLocal() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
