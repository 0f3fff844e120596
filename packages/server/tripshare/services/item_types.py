"""
Item type registry: the closed set of travel item types that can carry companions.

The mapping is built once at import time and exposed read-only.
"""

from __future__ import annotations

import uuid
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from tripshare.core.errors import UnknownItemTypeError
from tripshare.models.items import CarRental, Event, Flight, Hotel, Transportation
from tripshare_shared.schemas.common import ITEM_TYPE_ORDER, ItemType
from tripshare_shared.schemas.permissions import PermissionUpdate

ITEM_TYPE_MODELS: Mapping[ItemType, type[SQLModel]] = MappingProxyType(
    {
        ItemType.FLIGHT: Flight,
        ItemType.HOTEL: Hotel,
        ItemType.TRANSPORTATION: Transportation,
        ItemType.CAR_RENTAL: CarRental,
        ItemType.EVENT: Event,
    }
)

DEFAULT_PERMISSIONS: Mapping[str, bool] = MappingProxyType(
    {
        "can_view": True,
        "can_edit": False,
        "can_manage_companions": False,
    }
)


class ItemRef(NamedTuple):
    item_type: ItemType
    item_id: uuid.UUID


def parse_item_type(item_type: str | ItemType) -> ItemType:
    try:
        return ItemType(item_type)
    except ValueError:
        raise UnknownItemTypeError(item_type) from None


def get_item_model(item_type: str | ItemType) -> type[SQLModel]:
    return ITEM_TYPE_MODELS[parse_item_type(item_type)]


def cascade_permissions(perms: Optional[PermissionUpdate] = None) -> dict[str, bool]:
    """Defaults for a newly cascaded companion with ``perms`` merged over them."""
    merged = dict(DEFAULT_PERMISSIONS)
    if perms is not None:
        merged.update(perms.changes())
    return merged


async def list_trip_items(session: AsyncSession, trip_id: uuid.UUID) -> list[ItemRef]:
    """Every item of every type currently attached to the trip."""
    refs: list[ItemRef] = []
    for item_type in ITEM_TYPE_ORDER:
        model = ITEM_TYPE_MODELS[item_type]
        result = await session.execute(select(model.id).where(model.trip_id == trip_id))
        refs.extend(ItemRef(item_type, row[0]) for row in result.all())
    return refs
