"""Common dependencies for API routes."""
from __future__ import annotations

from collections.abc import Iterator
from threading import Lock

from fastapi import Depends
from sqlalchemy.orm import Session

from proposal_registry.core.config import get_settings
from proposal_registry.db.session import SessionLocal
from proposal_registry.services import ProposalRegistry, SqlAlchemyProposalStore

# Sync routes run on a threadpool; every request-scoped registry serialises
# its read-check-write sequences on this lock.
registry_lock = Lock()


def get_db_session() -> Iterator[Session]:
    """One session per request, closed once the response is sent."""
    with SessionLocal() as session:
        yield session


def get_registry(session: Session = Depends(get_db_session)) -> ProposalRegistry:
    """Build a registry over the request-scoped SQL store."""

    return ProposalRegistry(
        SqlAlchemyProposalStore(session),
        restrict_delete_to_owner=get_settings().restrict_delete_to_owner,
        lock=registry_lock,
    )


__all__ = ["get_db_session", "get_registry", "registry_lock"]
