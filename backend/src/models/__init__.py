"""SQLAlchemy models."""
from models.account import Account
from models.base import Base, TimestampMixin

__all__ = [
    "Account",
    "Base",
    "TimestampMixin",
]
