"""
Companion cascade service: mirrors trip membership onto the trip's items.

Rows written here carry ``inherited_from_trip=True``. Removal and permission
updates only ever touch such rows, so item grants made directly on an item
survive any trip-level change.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager, nullcontext
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tripshare.core.config import get_settings
from tripshare.core.database import insert_ignore_duplicates
from tripshare.models.sharing import ItemCompanion, TripCompanion
from tripshare.services.item_types import (
    DEFAULT_PERMISSIONS,
    ItemRef,
    cascade_permissions,
    list_trip_items,
)
from tripshare_shared.schemas.common import CascadeTrigger, CompanionStatus
from tripshare_shared.schemas.permissions import PermissionUpdate

log = structlog.get_logger()

ITEM_COMPANION_KEY = ("item_type", "item_id", "companion_id")


@asynccontextmanager
async def _cascade_scope(session: AsyncSession, operation: str, companion_id: uuid.UUID, trip_id: uuid.UUID):
    """SAVEPOINT around one cascade when configured; logs and re-raises storage errors."""
    scope = session.begin_nested() if get_settings().cascade_transactional else nullcontext()
    try:
        async with scope:
            yield
    except SQLAlchemyError as exc:
        log.error(
            f"cascade.{operation}_failed",
            companion_id=str(companion_id),
            trip_id=str(trip_id),
            error=str(exc),
        )
        raise


async def _is_trip_member(session: AsyncSession, companion_id: uuid.UUID, trip_id: uuid.UUID) -> bool:
    result = await session.execute(
        select(TripCompanion.id).where(
            TripCompanion.trip_id == trip_id,
            TripCompanion.companion_id == companion_id,
        )
    )
    return result.first() is not None


def _inherited_row_filter(ref: ItemRef, companion_id: uuid.UUID):
    return (
        ItemCompanion.item_type == ref.item_type.value,
        ItemCompanion.item_id == ref.item_id,
        ItemCompanion.companion_id == companion_id,
        ItemCompanion.inherited_from_trip.is_(True),
    )


async def cascade_add_to_all_items(
    session: AsyncSession,
    companion_id: uuid.UUID,
    trip_id: uuid.UUID,
    acting_user_id: uuid.UUID,
    perms: Optional[PermissionUpdate] = None,
) -> int:
    """Add the companion to every item of the trip.

    Returns the number of items in the trip. Rows that already exist for an
    item are left untouched, so re-running is safe. A companion without a
    trip membership row gets nothing and the call returns 0.
    """
    async with _cascade_scope(session, "add", companion_id, trip_id):
        if not await _is_trip_member(session, companion_id, trip_id):
            log.warning("cascade.add_not_member", companion_id=str(companion_id), trip_id=str(trip_id))
            return 0

        refs = await list_trip_items(session, trip_id)
        if not refs:
            log.debug("cascade.add_no_items", companion_id=str(companion_id), trip_id=str(trip_id))
            return 0

        granted = cascade_permissions(perms)
        now = datetime.now(timezone.utc)
        rows = [
            {
                "id": uuid.uuid4(),
                "item_type": ref.item_type.value,
                "item_id": ref.item_id,
                "companion_id": companion_id,
                "status": CompanionStatus.ATTENDING.value,
                "added_by_user_id": acting_user_id,
                "inherited_from_trip": True,
                "created_at": now,
                "updated_at": now,
                **granted,
            }
            for ref in refs
        ]
        await insert_ignore_duplicates(session, ItemCompanion, rows, ITEM_COMPANION_KEY)

    log.debug(
        "cascade.add_completed",
        companion_id=str(companion_id),
        trip_id=str(trip_id),
        items=len(rows),
    )
    return len(rows)


async def cascade_remove_from_all_items(
    session: AsyncSession,
    companion_id: uuid.UUID,
    trip_id: uuid.UUID,
) -> int:
    """Delete the companion's inherited rows on every item of the trip. Returns rows deleted."""
    removed = 0
    async with _cascade_scope(session, "remove", companion_id, trip_id):
        for ref in await list_trip_items(session, trip_id):
            result = await session.execute(
                delete(ItemCompanion)
                .where(*_inherited_row_filter(ref, companion_id))
                .execution_options(synchronize_session=False)
            )
            removed += result.rowcount

    log.debug(
        "cascade.remove_completed",
        companion_id=str(companion_id),
        trip_id=str(trip_id),
        removed=removed,
    )
    return removed


async def update_cascaded_permissions(
    session: AsyncSession,
    companion_id: uuid.UUID,
    trip_id: uuid.UUID,
    perms: PermissionUpdate,
) -> int:
    """Apply ``perms`` to the companion's inherited rows on every item of the trip."""
    changes = perms.changes()
    if not changes:
        return 0

    updated = 0
    async with _cascade_scope(session, "update", companion_id, trip_id):
        for ref in await list_trip_items(session, trip_id):
            result = await session.execute(
                update(ItemCompanion)
                .where(*_inherited_row_filter(ref, companion_id))
                .values(**changes, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            updated += result.rowcount

    log.debug(
        "cascade.update_completed",
        companion_id=str(companion_id),
        trip_id=str(trip_id),
        updated=updated,
        changes=changes,
    )
    return updated


async def apply_cascade_trigger(
    session: AsyncSession,
    trigger: CascadeTrigger,
    companion_id: uuid.UUID,
    trip_id: uuid.UUID,
    acting_user_id: uuid.UUID,
    perms: Optional[PermissionUpdate] = None,
) -> int:
    """Run the cascade primitives for a trip membership change.

    Demotion writes the revoked fields the caller passed (``False`` values
    only) onto inherited rows, or reverts edit and manage rights to their
    defaults when nothing was passed. It never grants a right and never
    removes the companion from the items.
    """
    settings = get_settings()
    trigger = CascadeTrigger(trigger)
    perms = perms or PermissionUpdate()

    if trigger == CascadeTrigger.ADD_TO_TRIP:
        if not settings.cascade_auto_add:
            return 0
        return await cascade_add_to_all_items(session, companion_id, trip_id, acting_user_id, perms)

    if trigger == CascadeTrigger.REMOVE_FROM_TRIP:
        if not settings.cascade_auto_remove:
            return 0
        return await cascade_remove_from_all_items(session, companion_id, trip_id)

    if trigger == CascadeTrigger.PROMOTE_PERMISSIONS:
        if not settings.cascade_auto_promote:
            return 0
        # Items added to the trip since the first cascade get a row; existing rows take the new rights
        await cascade_add_to_all_items(session, companion_id, trip_id, acting_user_id, perms)
        return await update_cascaded_permissions(session, companion_id, trip_id, perms)

    if not settings.cascade_auto_demote:
        return 0
    requested = perms.changes()
    if requested:
        revoked = {field: False for field, value in requested.items() if not value}
    else:
        revoked = {field: DEFAULT_PERMISSIONS[field] for field in ("can_edit", "can_manage_companions")}
    return await update_cascaded_permissions(session, companion_id, trip_id, PermissionUpdate(**revoked))
