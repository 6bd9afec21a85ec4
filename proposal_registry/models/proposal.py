"""Proposal ORM model."""
from __future__ import annotations

from sqlalchemy import Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from proposal_registry.models.base import Base, TimestampMixin


class Proposal(TimestampMixin, Base):
    """One stored proposal, rewritten as a whole on every mutation."""

    __tablename__ = "proposals"
    __table_args__ = (Index("ix_proposals_owner", "owner"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    voters: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    yes_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    no_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


__all__ = ["Proposal"]
