"""Travel companion contact records."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class TravelCompanion(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "travel_companions"

    name: str = Field(nullable=False)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str = Field(nullable=False, index=True)
    # Null until the companion registers an account
    linked_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    created_by_user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
