"""
Companion permission service: resolution and mutation of sharing rights.

Hierarchy:
- Global grants (CompanionPermission) relate two accounts independent of any trip
- Trip grants (TripCompanion) cover a trip and, by fallback, its items
- Item grants (ItemCompanion) override the trip grant for one item

Owners of a trip or item always hold full rights. A missing trip or item
resolves to no rights; only storage errors raise.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tripshare.core.errors import PermissionDeniedError
from tripshare.models.companion import TravelCompanion
from tripshare.models.sharing import CompanionPermission, ItemCompanion, TripCompanion
from tripshare.models.trip import Trip
from tripshare.services.item_types import get_item_model, parse_item_type
from tripshare_shared.schemas.common import ItemType, PermissionLevel
from tripshare_shared.schemas.permissions import (
    FULL_PERMISSIONS,
    NO_PERMISSIONS,
    PermissionUpdate,
    Permissions,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Companion lookups
# ---------------------------------------------------------------------------


async def _companion_ids_of(session: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    """Companions the user created or is linked to as an account."""
    result = await session.execute(
        select(TravelCompanion.id).where(
            or_(
                TravelCompanion.created_by_user_id == user_id,
                TravelCompanion.linked_user_id == user_id,
            )
        )
    )
    return [row[0] for row in result.all()]


async def _member_companion_ids(
    session: AsyncSession, owner_id: uuid.UUID, member_id: uuid.UUID
) -> list[uuid.UUID]:
    """The owner's companion records that are linked to the member's account."""
    result = await session.execute(
        select(TravelCompanion.id).where(
            TravelCompanion.created_by_user_id == owner_id,
            TravelCompanion.linked_user_id == member_id,
        )
    )
    return [row[0] for row in result.all()]


async def _trip_companion_row(
    session: AsyncSession, trip_id: uuid.UUID, companion_ids: list[uuid.UUID]
) -> Optional[TripCompanion]:
    if not companion_ids:
        return None
    result = await session.execute(
        select(TripCompanion)
        .where(
            TripCompanion.trip_id == trip_id,
            TripCompanion.companion_id.in_(companion_ids),
        )
        .order_by(TripCompanion.created_at, TripCompanion.id)
        .limit(1)
    )
    return result.scalars().first()


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


async def resolve_global_permissions(
    session: AsyncSession, user_id: uuid.UUID, target_user_id: uuid.UUID
) -> Permissions:
    """Rights ``user_id`` has granted to any companion record of ``target_user_id``."""
    companion_ids = await _companion_ids_of(session, target_user_id)
    if not companion_ids:
        return NO_PERMISSIONS

    result = await session.execute(
        select(CompanionPermission)
        .where(
            CompanionPermission.granted_by_user_id == user_id,
            CompanionPermission.companion_id.in_(companion_ids),
        )
        .order_by(CompanionPermission.created_at, CompanionPermission.id)
        .limit(1)
    )
    grant = result.scalars().first()
    return Permissions.from_row(grant) if grant else NO_PERMISSIONS


async def resolve_trip_permissions(
    session: AsyncSession, user_id: uuid.UUID, trip_id: uuid.UUID
) -> Permissions:
    trip = await session.get(Trip, trip_id)
    if trip is None:
        return NO_PERMISSIONS
    if trip.owner_user_id == user_id:
        return FULL_PERMISSIONS

    companion_ids = await _member_companion_ids(session, trip.owner_user_id, user_id)
    row = await _trip_companion_row(session, trip.id, companion_ids)
    return Permissions.from_row(row) if row else NO_PERMISSIONS


async def resolve_item_permissions(
    session: AsyncSession,
    user_id: uuid.UUID,
    item_type: str | ItemType,
    item_id: uuid.UUID,
) -> Permissions:
    """Item row first; the trip row only when the item has no row for the companion."""
    item_type = parse_item_type(item_type)
    item = await session.get(get_item_model(item_type), item_id)
    if item is None:
        return NO_PERMISSIONS
    if item.user_id == user_id:
        return FULL_PERMISSIONS

    companion_ids = await _member_companion_ids(session, item.user_id, user_id)
    if not companion_ids:
        return NO_PERMISSIONS

    result = await session.execute(
        select(ItemCompanion)
        .where(
            ItemCompanion.item_type == item_type.value,
            ItemCompanion.item_id == item.id,
            ItemCompanion.companion_id.in_(companion_ids),
        )
        .order_by(ItemCompanion.created_at, ItemCompanion.id)
        .limit(1)
    )
    item_row = result.scalars().first()
    if item_row is not None:
        return Permissions.from_row(item_row)

    if item.trip_id is not None:
        trip_row = await _trip_companion_row(session, item.trip_id, companion_ids)
        if trip_row is not None:
            return Permissions.from_row(trip_row)

    return NO_PERMISSIONS


# ---------------------------------------------------------------------------
# Boolean queries
# ---------------------------------------------------------------------------


async def can_view_trips_of(session: AsyncSession, user_id: uuid.UUID, target_user_id: uuid.UUID) -> bool:
    return (await resolve_global_permissions(session, user_id, target_user_id)).can_view


async def can_edit_trips_of(session: AsyncSession, user_id: uuid.UUID, target_user_id: uuid.UUID) -> bool:
    return (await resolve_global_permissions(session, user_id, target_user_id)).can_edit


async def can_manage_companions_of(
    session: AsyncSession, user_id: uuid.UUID, target_user_id: uuid.UUID
) -> bool:
    return (await resolve_global_permissions(session, user_id, target_user_id)).can_manage_companions


async def can_view_trip(session: AsyncSession, user_id: uuid.UUID, trip_id: uuid.UUID) -> bool:
    return (await resolve_trip_permissions(session, user_id, trip_id)).can_view


async def can_edit_trip(session: AsyncSession, user_id: uuid.UUID, trip_id: uuid.UUID) -> bool:
    return (await resolve_trip_permissions(session, user_id, trip_id)).can_edit


async def can_manage_companions_on_trip(
    session: AsyncSession, user_id: uuid.UUID, trip_id: uuid.UUID
) -> bool:
    return (await resolve_trip_permissions(session, user_id, trip_id)).can_manage_companions


async def can_view_item(
    session: AsyncSession, user_id: uuid.UUID, item_type: str | ItemType, item_id: uuid.UUID
) -> bool:
    return (await resolve_item_permissions(session, user_id, item_type, item_id)).can_view


async def can_edit_item(
    session: AsyncSession, user_id: uuid.UUID, item_type: str | ItemType, item_id: uuid.UUID
) -> bool:
    return (await resolve_item_permissions(session, user_id, item_type, item_id)).can_edit


async def can_manage_companions_on_item(
    session: AsyncSession, user_id: uuid.UUID, item_type: str | ItemType, item_id: uuid.UUID
) -> bool:
    return (
        await resolve_item_permissions(session, user_id, item_type, item_id)
    ).can_manage_companions


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


async def require_trip_permission(
    session: AsyncSession,
    user_id: uuid.UUID,
    trip_id: uuid.UUID,
    level: PermissionLevel,
) -> Permissions:
    perms = await resolve_trip_permissions(session, user_id, trip_id)
    if not perms.allows(level):
        log.info("permissions.denied", user_id=str(user_id), trip_id=str(trip_id), level=PermissionLevel(level).value)
        raise PermissionDeniedError(user_id, PermissionLevel(level).value, f"trip {trip_id}")
    return perms


async def require_item_permission(
    session: AsyncSession,
    user_id: uuid.UUID,
    item_type: str | ItemType,
    item_id: uuid.UUID,
    level: PermissionLevel,
) -> Permissions:
    perms = await resolve_item_permissions(session, user_id, item_type, item_id)
    if not perms.allows(level):
        log.info(
            "permissions.denied",
            user_id=str(user_id),
            item_type=parse_item_type(item_type).value,
            item_id=str(item_id),
            level=PermissionLevel(level).value,
        )
        raise PermissionDeniedError(
            user_id, PermissionLevel(level).value, f"{parse_item_type(item_type).value} {item_id}"
        )
    return perms


# ---------------------------------------------------------------------------
# Mutators
# ---------------------------------------------------------------------------


def _apply(row, perms: PermissionUpdate) -> dict[str, bool]:
    changes = perms.changes()
    for key, value in changes.items():
        setattr(row, key, value)
    return changes


async def update_companion_permissions(
    session: AsyncSession,
    granting_user_id: uuid.UUID,
    companion_id: uuid.UUID,
    perms: PermissionUpdate,
) -> CompanionPermission:
    """Find-or-create the global grant, then apply the fields set in ``perms``."""
    result = await session.execute(
        select(CompanionPermission).where(
            CompanionPermission.granted_by_user_id == granting_user_id,
            CompanionPermission.companion_id == companion_id,
        )
    )
    grant = result.scalar_one_or_none()
    created = grant is None
    if created:
        grant = CompanionPermission(granted_by_user_id=granting_user_id, companion_id=companion_id)

    changes = _apply(grant, perms)
    session.add(grant)
    await session.flush()

    log.info(
        "permissions.global_updated",
        granted_by=str(granting_user_id),
        companion_id=str(companion_id),
        created=created,
        changes=changes,
    )
    return grant


async def update_trip_companion_permissions(
    session: AsyncSession,
    trip_id: uuid.UUID,
    companion_id: uuid.UUID,
    perms: PermissionUpdate,
) -> Optional[TripCompanion]:
    """Apply ``perms`` to an existing trip membership; no row is a no-op returning None."""
    result = await session.execute(
        select(TripCompanion).where(
            TripCompanion.trip_id == trip_id,
            TripCompanion.companion_id == companion_id,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        return None

    changes = _apply(row, perms)
    session.add(row)
    await session.flush()
    log.info("permissions.trip_updated", trip_id=str(trip_id), companion_id=str(companion_id), changes=changes)
    return row


async def update_item_companion_permissions(
    session: AsyncSession,
    item_type: str | ItemType,
    item_id: uuid.UUID,
    companion_id: uuid.UUID,
    perms: PermissionUpdate,
) -> Optional[ItemCompanion]:
    item_type = parse_item_type(item_type)
    result = await session.execute(
        select(ItemCompanion).where(
            ItemCompanion.item_type == item_type.value,
            ItemCompanion.item_id == item_id,
            ItemCompanion.companion_id == companion_id,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        return None

    changes = _apply(row, perms)
    session.add(row)
    await session.flush()
    log.info(
        "permissions.item_updated",
        item_type=item_type.value,
        item_id=str(item_id),
        companion_id=str(companion_id),
        changes=changes,
    )
    return row
