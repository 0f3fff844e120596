"""User account model. Lifecycle is owned by the auth subsystem."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(nullable=False, unique=True, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
