"""Companion sharing tables: trip membership, item membership and global grants."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from tripshare_shared.schemas.common import CompanionStatus, PermissionSource

from .base import PermissionFlagsMixin, TimestampMixin, UUIDMixin


class TripCompanion(UUIDMixin, TimestampMixin, PermissionFlagsMixin, SQLModel, table=True):
    __tablename__ = "trip_companions"
    __table_args__ = (
        sa.UniqueConstraint("trip_id", "companion_id", name="uq_trip_companion"),
    )

    trip_id: uuid.UUID = Field(foreign_key="trips.id", nullable=False, index=True)
    companion_id: uuid.UUID = Field(foreign_key="travel_companions.id", nullable=False, index=True)
    added_by_user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    permission_source: str = Field(default=PermissionSource.EXPLICIT.value, nullable=False)  # owner | manage_travel | explicit | inherited


class ItemCompanion(UUIDMixin, TimestampMixin, PermissionFlagsMixin, SQLModel, table=True):
    __tablename__ = "item_companions"
    __table_args__ = (
        sa.UniqueConstraint("item_type", "item_id", "companion_id", name="uq_item_companion"),
        sa.Index("ix_item_companions_item", "item_type", "item_id"),
    )

    item_type: str = Field(nullable=False)  # flight | hotel | transportation | car_rental | event
    item_id: uuid.UUID = Field(nullable=False)
    companion_id: uuid.UUID = Field(foreign_key="travel_companions.id", nullable=False, index=True)
    status: str = Field(default=CompanionStatus.ATTENDING.value, nullable=False)  # attending | not_attending
    added_by_user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    # True only for rows written by the trip cascade
    inherited_from_trip: bool = Field(default=False, nullable=False)


class CompanionPermission(UUIDMixin, TimestampMixin, PermissionFlagsMixin, SQLModel, table=True):
    __tablename__ = "companion_permissions"
    __table_args__ = (
        sa.UniqueConstraint("granted_by_user_id", "companion_id", name="uq_companion_permission"),
    )

    granted_by_user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    companion_id: uuid.UUID = Field(foreign_key="travel_companions.id", nullable=False, index=True)
