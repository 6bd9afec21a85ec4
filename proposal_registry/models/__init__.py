"""ORM models package."""
from .base import Base, TimestampMixin
from .proposal import Proposal

__all__ = [
    "Base",
    "Proposal",
    "TimestampMixin",
]
