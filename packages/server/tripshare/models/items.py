"""Travel item tables. Only the columns needed for ownership and trip membership are modelled."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class TravelItemMixin(UUIDMixin, TimestampMixin, SQLModel):
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    # Null for standalone items
    trip_id: Optional[uuid.UUID] = Field(default=None, foreign_key="trips.id", index=True)
    name: Optional[str] = None


class Flight(TravelItemMixin, table=True):
    __tablename__ = "flights"


class Hotel(TravelItemMixin, table=True):
    __tablename__ = "hotels"


class Transportation(TravelItemMixin, table=True):
    __tablename__ = "transportation"


class CarRental(TravelItemMixin, table=True):
    __tablename__ = "car_rentals"


class Event(TravelItemMixin, table=True):
    __tablename__ = "events"
