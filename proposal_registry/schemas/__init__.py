"""Pydantic schemas package."""

from .proposal import ProposalPayload, ProposalRead

__all__ = [
    "ProposalPayload",
    "ProposalRead",
]
