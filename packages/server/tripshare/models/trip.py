"""Trip model."""

from datetime import date
from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Trip(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "trips"

    owner_user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
