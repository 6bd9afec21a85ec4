"""Business logic for creating, voting on, editing and deleting proposals."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from threading import Lock
from typing import Literal

from proposal_registry.services.storage import ProposalRecord, ProposalStore

LOGGER = logging.getLogger(__name__)

VoteChoice = Literal["yes", "no"]


class RegistryError(RuntimeError):
    """Base exception for proposal registry errors."""


class InvalidInputError(RegistryError):
    """Raised when a required field is missing or empty."""


class ProposalNotFoundError(RegistryError):
    """Raised when no proposal is stored under the supplied identifier."""


class ForbiddenError(RegistryError):
    """Raised when the caller lacks the ownership the operation requires."""


class AlreadyVotedError(RegistryError):
    """Raised when the caller has already voted on the proposal."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_proposal_id() -> str:
    return str(uuid.uuid4())


def _validate_fields(title: str | None, description: str | None) -> None:
    if not title or not description:
        raise InvalidInputError("Missing required fields")


class ProposalRegistry:
    """Flat CRUD and voting over a string-keyed proposal store.

    Every check runs before the single store write, so a failed call never
    changes stored state. Mutations hold ``lock`` from lookup to write; pass the
    same lock to every registry built over one store.
    """

    def __init__(
        self,
        store: ProposalStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_proposal_id,
        restrict_delete_to_owner: bool = False,
        lock: Lock | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._id_factory = id_factory
        self._restrict_delete_to_owner = restrict_delete_to_owner
        self._lock = lock or Lock()

    def get_proposals(self) -> list[ProposalRecord]:
        return self._store.values()

    def get_proposal(self, proposal_id: str) -> ProposalRecord:
        proposal = self._store.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"A proposal with id={proposal_id} not found")
        return proposal

    def create_proposal(
        self,
        *,
        caller: str,
        title: str,
        description: str,
        now: datetime | None = None,
    ) -> ProposalRecord:
        _validate_fields(title, description)

        proposal = ProposalRecord(
            id=self._id_factory(),
            owner=caller,
            title=title,
            description=description,
            voters=(),
            yes_votes=0,
            no_votes=0,
            created_at=now or self._clock(),
            updated_at=None,
        )
        self._store.insert(proposal)
        LOGGER.info("proposal created", extra={"proposal_id": proposal.id, "owner": caller})
        return proposal

    def vote_yes(self, proposal_id: str, *, caller: str, now: datetime | None = None) -> ProposalRecord:
        return self._vote(proposal_id, caller=caller, choice="yes", now=now)

    def vote_no(self, proposal_id: str, *, caller: str, now: datetime | None = None) -> ProposalRecord:
        return self._vote(proposal_id, caller=caller, choice="no", now=now)

    def update_proposal(
        self,
        proposal_id: str,
        *,
        caller: str,
        title: str,
        description: str,
        now: datetime | None = None,
    ) -> ProposalRecord:
        with self._lock:
            proposal = self._lookup(proposal_id, action="update")
            if proposal.owner != caller:
                raise ForbiddenError("Only the owner of a proposal can update it")
            _validate_fields(title, description)

            updated = replace(
                proposal,
                title=title,
                description=description,
                updated_at=now or self._clock(),
            )
            self._store.insert(updated)
        LOGGER.info("proposal updated", extra={"proposal_id": proposal_id, "owner": caller})
        return updated

    def delete_proposal(self, proposal_id: str, *, caller: str) -> ProposalRecord:
        with self._lock:
            if self._restrict_delete_to_owner:
                proposal = self._lookup(proposal_id, action="delete")
                if proposal.owner != caller:
                    raise ForbiddenError("Only the owner of a proposal can delete it")

            removed = self._store.remove(proposal_id)
        if removed is None:
            raise ProposalNotFoundError(
                f"Couldn't delete a proposal with id={proposal_id}. Proposal not found."
            )
        LOGGER.info("proposal deleted", extra={"proposal_id": proposal_id, "deleted_by": caller})
        return removed

    def _lookup(self, proposal_id: str, *, action: str) -> ProposalRecord:
        proposal = self._store.get(proposal_id, for_update=True)
        if proposal is None:
            raise ProposalNotFoundError(
                f"Couldn't {action} a proposal with id={proposal_id}. Proposal not found"
            )
        return proposal

    def _vote(
        self,
        proposal_id: str,
        *,
        caller: str,
        choice: VoteChoice,
        now: datetime | None,
    ) -> ProposalRecord:
        with self._lock:
            proposal = self._lookup(proposal_id, action="update")
            if proposal.owner == caller:
                raise ForbiddenError("Owners cannot vote for their own proposal")
            if caller in proposal.voters:
                raise AlreadyVotedError("Already voted")

            updated = replace(
                proposal,
                voters=(*proposal.voters, caller),
                yes_votes=proposal.yes_votes + (1 if choice == "yes" else 0),
                no_votes=proposal.no_votes + (1 if choice == "no" else 0),
                updated_at=now or self._clock(),
            )
            self._store.insert(updated)
        LOGGER.info(
            "vote recorded",
            extra={"proposal_id": proposal_id, "voter": caller, "choice": choice},
        )
        return updated


__all__ = [
    "AlreadyVotedError",
    "ForbiddenError",
    "InvalidInputError",
    "ProposalNotFoundError",
    "ProposalRegistry",
    "RegistryError",
    "VoteChoice",
]
