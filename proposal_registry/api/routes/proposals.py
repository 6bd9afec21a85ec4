"""Proposal CRUD and voting endpoints."""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, status

from proposal_registry.api.deps import get_registry
from proposal_registry.api.routes.auth import AuthenticatedUser, get_current_user
from proposal_registry.obs import operation_span, record_operation
from proposal_registry.schemas.proposal import ProposalPayload, ProposalRead
from proposal_registry.services import (
    AlreadyVotedError,
    ForbiddenError,
    InvalidInputError,
    ProposalNotFoundError,
    ProposalRegistry,
    RegistryError,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals")

T = TypeVar("T")

_ERROR_STATUS: dict[type[RegistryError], int] = {
    InvalidInputError: 422,
    ProposalNotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    AlreadyVotedError: status.HTTP_409_CONFLICT,
}


def _run(
    operation: str,
    call: Callable[[], T],
    *,
    caller: str | None = None,
    proposal_id: str | None = None,
) -> T:
    """Execute a registry call, translating domain errors into HTTP responses."""

    with operation_span(operation, caller=caller, proposal_id=proposal_id):
        try:
            result = call()
        except RegistryError as exc:
            outcome = type(exc).__name__
            record_operation(operation, outcome)
            LOGGER.info(
                "proposal operation rejected",
                extra={"operation": operation, "outcome": outcome, "proposal_id": proposal_id},
            )
            raise HTTPException(
                status_code=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
                detail=str(exc),
            ) from exc
    record_operation(operation, "ok")
    return result


@router.get("", response_model=list[ProposalRead])
def list_proposals(registry: ProposalRegistry = Depends(get_registry)) -> list[ProposalRead]:
    proposals = _run("get_proposals", registry.get_proposals)
    return [ProposalRead.model_validate(item) for item in proposals]


@router.get("/{proposal_id}", response_model=ProposalRead)
def get_proposal(
    proposal_id: str,
    registry: ProposalRegistry = Depends(get_registry),
) -> ProposalRead:
    proposal = _run(
        "get_proposal", lambda: registry.get_proposal(proposal_id), proposal_id=proposal_id
    )
    return ProposalRead.model_validate(proposal)


@router.post("", response_model=ProposalRead, status_code=status.HTTP_201_CREATED)
def create_proposal(
    payload: ProposalPayload,
    registry: ProposalRegistry = Depends(get_registry),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProposalRead:
    proposal = _run(
        "create_proposal",
        lambda: registry.create_proposal(
            caller=user.principal, title=payload.title, description=payload.description
        ),
        caller=user.principal,
    )
    return ProposalRead.model_validate(proposal)


@router.post("/{proposal_id}/votes/yes", response_model=ProposalRead)
def vote_yes(
    proposal_id: str,
    registry: ProposalRegistry = Depends(get_registry),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProposalRead:
    proposal = _run(
        "vote_yes",
        lambda: registry.vote_yes(proposal_id, caller=user.principal),
        caller=user.principal,
        proposal_id=proposal_id,
    )
    return ProposalRead.model_validate(proposal)


@router.post("/{proposal_id}/votes/no", response_model=ProposalRead)
def vote_no(
    proposal_id: str,
    registry: ProposalRegistry = Depends(get_registry),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProposalRead:
    proposal = _run(
        "vote_no",
        lambda: registry.vote_no(proposal_id, caller=user.principal),
        caller=user.principal,
        proposal_id=proposal_id,
    )
    return ProposalRead.model_validate(proposal)


@router.put("/{proposal_id}", response_model=ProposalRead)
def update_proposal(
    proposal_id: str,
    payload: ProposalPayload,
    registry: ProposalRegistry = Depends(get_registry),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProposalRead:
    proposal = _run(
        "update_proposal",
        lambda: registry.update_proposal(
            proposal_id,
            caller=user.principal,
            title=payload.title,
            description=payload.description,
        ),
        caller=user.principal,
        proposal_id=proposal_id,
    )
    return ProposalRead.model_validate(proposal)


@router.delete("/{proposal_id}", response_model=ProposalRead)
def delete_proposal(
    proposal_id: str,
    registry: ProposalRegistry = Depends(get_registry),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProposalRead:
    proposal = _run(
        "delete_proposal",
        lambda: registry.delete_proposal(proposal_id, caller=user.principal),
        caller=user.principal,
        proposal_id=proposal_id,
    )
    return ProposalRead.model_validate(proposal)


__all__ = [
    "create_proposal",
    "delete_proposal",
    "get_proposal",
    "list_proposals",
    "router",
    "update_proposal",
    "vote_no",
    "vote_yes",
]
