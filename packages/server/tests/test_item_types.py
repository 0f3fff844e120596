"""
Tests for the item type registry.

Tests cover:
- Closed set of item types and model lookup
- Unknown type rejection
- Cascade permission defaults and overrides
- Trip item enumeration across all types
"""

from __future__ import annotations

import pytest

from tripshare.core.errors import ConfigurationError, UnknownItemTypeError
from tripshare.models import CarRental, Event, Flight, Hotel, Transportation
from tripshare.services.item_types import (
    DEFAULT_PERMISSIONS,
    ITEM_TYPE_MODELS,
    cascade_permissions,
    get_item_model,
    list_trip_items,
)
from tripshare_shared.schemas.common import ITEM_TYPE_ORDER, ItemType
from tripshare_shared.schemas.permissions import PermissionUpdate


class TestRegistry:
    def test_all_five_types_registered(self):
        assert set(ITEM_TYPE_MODELS) == set(ItemType)
        assert len(ITEM_TYPE_ORDER) == 5

    @pytest.mark.parametrize(
        "tag,model",
        [
            ("flight", Flight),
            ("hotel", Hotel),
            ("transportation", Transportation),
            ("car_rental", CarRental),
            ("event", Event),
        ],
    )
    def test_lookup_by_tag(self, tag, model):
        assert get_item_model(tag) is model
        assert get_item_model(ItemType(tag)) is model

    def test_unknown_type_raises_configuration_error(self):
        with pytest.raises(UnknownItemTypeError) as exc_info:
            get_item_model("cruise")
        assert isinstance(exc_info.value, ConfigurationError)
        assert "cruise" in str(exc_info.value)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            ITEM_TYPE_MODELS["cruise"] = Flight  # type: ignore[index]
        with pytest.raises(TypeError):
            DEFAULT_PERMISSIONS["can_edit"] = True  # type: ignore[index]


class TestCascadePermissions:
    def test_defaults(self):
        assert cascade_permissions() == {
            "can_view": True,
            "can_edit": False,
            "can_manage_companions": False,
        }

    def test_overrides_only_set_fields(self):
        merged = cascade_permissions(PermissionUpdate(can_edit=True))
        assert merged == {"can_view": True, "can_edit": True, "can_manage_companions": False}

    def test_view_can_be_explicitly_overridden(self):
        merged = cascade_permissions(PermissionUpdate(can_view=False))
        assert merged["can_view"] is False


async def test_list_trip_items_covers_every_type(world):
    owner = await world.user("owner")
    trip = await world.trip(owner)
    other_trip = await world.trip(owner, name="Other")
    expected = set()
    for item_type in ItemType:
        item = await world.item(item_type.value, owner, trip)
        expected.add((item_type, item.id))
    await world.item("flight", owner, other_trip)
    await world.item("hotel", owner)  # standalone

    refs = await list_trip_items(world.session, trip.id)

    assert {(r.item_type, r.item_id) for r in refs} == expected
    assert [r.item_type for r in refs] == ITEM_TYPE_ORDER


async def test_list_trip_items_empty_trip(world):
    owner = await world.user("owner")
    trip = await world.trip(owner)
    assert await list_trip_items(world.session, trip.id) == []
