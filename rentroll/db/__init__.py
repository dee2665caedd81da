"""
Database init - Exports for services and routes
"""

from .base import Base, TimestampMixin, SoftDeleteMixin
from .session import unit_of_work, read_session, with_deadline

__all__ = [
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "unit_of_work",
    "read_session",
    "with_deadline",
]
