"""Proposal registry services."""

from .registry import (
    AlreadyVotedError,
    ForbiddenError,
    InvalidInputError,
    ProposalNotFoundError,
    ProposalRegistry,
    RegistryError,
)
from .storage import InMemoryProposalStore, ProposalRecord, ProposalStore, SqlAlchemyProposalStore

__all__ = [
    "AlreadyVotedError",
    "ForbiddenError",
    "InMemoryProposalStore",
    "InvalidInputError",
    "ProposalNotFoundError",
    "ProposalRecord",
    "ProposalRegistry",
    "ProposalStore",
    "RegistryError",
    "SqlAlchemyProposalStore",
]
