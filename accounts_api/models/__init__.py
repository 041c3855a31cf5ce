"""SQLAlchemy ORM models."""

from accounts_api.models.base import Base
from accounts_api.models.user import User

__all__ = ["Base", "User"]
