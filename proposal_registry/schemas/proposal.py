"""Schemas for proposal endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProposalPayload(BaseModel):
    # Empty values are rejected by the registry so create and update share one rule.
    title: str = Field(default="", max_length=255)
    description: str = Field(default="", max_length=4096)


class ProposalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner: str
    title: str
    description: str
    voters: list[str]
    yes_votes: int
    no_votes: int
    created_at: datetime
    updated_at: datetime | None = None


__all__ = ["ProposalPayload", "ProposalRead"]
