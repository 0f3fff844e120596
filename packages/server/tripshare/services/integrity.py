"""
Integrity audit for cascaded item memberships.

An inherited item row must mirror a trip membership of the same companion on
the item's trip. Rows that no longer do (raced or partially applied cascades)
are reported and can be repaired.
"""

from __future__ import annotations

import structlog
from sqlalchemy import and_, delete, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tripshare.models.sharing import ItemCompanion, TripCompanion
from tripshare.services.item_types import ITEM_TYPE_MODELS

log = structlog.get_logger()


async def find_orphaned_inherited_rows(session: AsyncSession) -> list[ItemCompanion]:
    orphans: list[ItemCompanion] = []
    for item_type, model in ITEM_TYPE_MODELS.items():
        membership = exists().where(
            and_(
                TripCompanion.trip_id == model.trip_id,
                TripCompanion.companion_id == ItemCompanion.companion_id,
            )
        )
        result = await session.execute(
            select(ItemCompanion)
            .join(model, model.id == ItemCompanion.item_id)
            .where(
                ItemCompanion.item_type == item_type.value,
                ItemCompanion.inherited_from_trip.is_(True),
                ~membership,
            )
        )
        orphans.extend(result.scalars().all())
    return orphans


async def repair_orphaned_inherited_rows(session: AsyncSession) -> int:
    """Delete inherited rows with no matching trip membership. Returns rows deleted."""
    orphans = await find_orphaned_inherited_rows(session)
    if not orphans:
        return 0

    await session.execute(
        delete(ItemCompanion)
        .where(ItemCompanion.id.in_([row.id for row in orphans]))
        .execution_options(synchronize_session=False)
    )
    log.info("integrity.orphans_removed", count=len(orphans))
    return len(orphans)
