"""Key-value storage backends for proposal records."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from proposal_registry.models import Proposal


@dataclass(frozen=True, slots=True)
class ProposalRecord:
    """Immutable value stored under ``id``; mutations produce a new record."""

    id: str
    owner: str
    title: str
    description: str
    voters: tuple[str, ...]
    yes_votes: int
    no_votes: int
    created_at: datetime
    updated_at: datetime | None = None


class ProposalStore(Protocol):
    """String-keyed map of proposal records."""

    def get(self, proposal_id: str, *, for_update: bool = False) -> ProposalRecord | None:
        """Return the record; ``for_update`` locks it until the next write in this store."""

    def insert(self, record: ProposalRecord) -> ProposalRecord | None:
        """Store ``record`` under its id and return the value it replaced."""

    def remove(self, proposal_id: str) -> ProposalRecord | None:
        """Drop the record and return it, or ``None`` when nothing was stored."""

    def values(self) -> list[ProposalRecord]:
        """Return every record in ascending key order."""


class InMemoryProposalStore:
    """Thread-safe dictionary store used for tests and local development."""

    def __init__(self) -> None:
        self._records: dict[str, ProposalRecord] = {}
        self._lock = Lock()

    def get(self, proposal_id: str, *, for_update: bool = False) -> ProposalRecord | None:
        with self._lock:
            return self._records.get(proposal_id)

    def insert(self, record: ProposalRecord) -> ProposalRecord | None:
        with self._lock:
            previous = self._records.get(record.id)
            self._records[record.id] = record
            return previous

    def remove(self, proposal_id: str) -> ProposalRecord | None:
        with self._lock:
            return self._records.pop(proposal_id, None)

    def values(self) -> list[ProposalRecord]:
        with self._lock:
            return [self._records[key] for key in sorted(self._records)]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_record(row: Proposal) -> ProposalRecord:
    return ProposalRecord(
        id=row.id,
        owner=row.owner,
        title=row.title,
        description=row.description,
        voters=tuple(row.voters or ()),
        yes_votes=row.yes_votes,
        no_votes=row.no_votes,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlAlchemyProposalStore:
    """Durable store backed by the ``proposals`` table.

    Each ``insert`` and ``remove`` commits on its own, so a registry operation
    maps onto exactly one transaction. ``get(..., for_update=True)`` issues
    ``SELECT ... FOR UPDATE`` so other processes writing the same row wait for
    that commit; the row lock is released at the latest when the session closes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, proposal_id: str, *, for_update: bool = False) -> ProposalRecord | None:
        row = self._session.get(
            Proposal, proposal_id, with_for_update=for_update, populate_existing=for_update
        )
        return _to_record(row) if row is not None else None

    def insert(self, record: ProposalRecord) -> ProposalRecord | None:
        row = self._session.get(Proposal, record.id)
        previous = _to_record(row) if row is not None else None
        if row is None:
            row = Proposal(id=record.id)
            self._session.add(row)

        row.owner = record.owner
        row.title = record.title
        row.description = record.description
        row.voters = list(record.voters)
        row.yes_votes = record.yes_votes
        row.no_votes = record.no_votes
        row.created_at = record.created_at
        row.updated_at = record.updated_at

        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return previous

    def remove(self, proposal_id: str) -> ProposalRecord | None:
        row = self._session.get(Proposal, proposal_id)
        if row is None:
            return None
        removed = _to_record(row)
        self._session.delete(row)
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return removed

    def values(self) -> list[ProposalRecord]:
        statement = select(Proposal).order_by(Proposal.id)
        return [_to_record(row) for row in self._session.scalars(statement).all()]


__all__ = [
    "InMemoryProposalStore",
    "ProposalRecord",
    "ProposalStore",
    "SqlAlchemyProposalStore",
]
