"""Account model for registered principals."""
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, DateTime, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column
from uuid6 import uuid7

from models.base import Base, TimestampMixin


class Account(Base, TimestampMixin):
    """
    Registered account with profile data and a bcrypt password hash.

    Email uniqueness is enforced here by the unique index, not by the service's
    pre-insert lookup.
    """

    __tablename__ = "accounts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid7)
    first_name: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(60), unique=True, index=True)
    password: Mapped[str] = mapped_column(
        String(255),
        comment="bcrypt hash - never the plaintext",
    )
    role: Mapped[str] = mapped_column(String(10), nullable=False, default="user")
    about: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(String(250), nullable=True)
    city: Mapped[str | None] = mapped_column(String(24), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    postcode: Mapped[int | None] = mapped_column(Integer, nullable=True)
    birthday: Mapped[date | None] = mapped_column(Date, nullable=True)
    login_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
