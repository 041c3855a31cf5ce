"""ORM model for user accounts."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from accounts_api.models.base import Base


class User(Base):
    """
    User account: identity, bcrypt password hash, profile images and the
    single active refresh token slot.

    refresh_token is overwritten on login and refresh and cleared on logout.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    fullname = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(2048), nullable=False, default="")
    cover_image = Column(String(2048), nullable=False, default="")
    refresh_token = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
