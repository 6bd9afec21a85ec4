"""Seed script creating the schema and a few demo proposals."""
from __future__ import annotations

import logging

from proposal_registry.db.session import engine, get_session
from proposal_registry.models import Base
from proposal_registry.services import ProposalRegistry, SqlAlchemyProposalStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_PROPOSALS = [
    ("alice", "Adopt a four-day work week", "Pilot a 32-hour week for one quarter."),
    ("bob", "Fund the community garden", "Allocate treasury funds for seeds and tools."),
]


def seed(registry: ProposalRegistry) -> None:
    """Create the demo proposals and cast one vote on each."""

    existing = {(item.owner, item.title) for item in registry.get_proposals()}
    for owner, title, description in DEMO_PROPOSALS:
        if (owner, title) in existing:
            logger.info("Proposal %r by %s already exists", title, owner)
            continue
        proposal = registry.create_proposal(caller=owner, title=title, description=description)
        registry.vote_yes(proposal.id, caller="carol")
        logger.info("Added proposal %s", proposal.id)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        seed(ProposalRegistry(SqlAlchemyProposalStore(session)))


if __name__ == "__main__":
    main()
