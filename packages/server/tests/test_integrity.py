"""Tests for the inherited-row integrity audit."""

from __future__ import annotations

from sqlalchemy import delete

from tripshare.models import TripCompanion
from tripshare.services.cascade import cascade_add_to_all_items
from tripshare.services.integrity import (
    find_orphaned_inherited_rows,
    repair_orphaned_inherited_rows,
)


async def _trip_with_cascade(world):
    owner = await world.user("owner")
    companion = await world.companion(created_by=owner)
    trip = await world.trip(owner)
    flight = await world.item("flight", owner, trip)
    hotel = await world.item("hotel", owner, trip)
    await world.trip_member(trip, companion)
    await cascade_add_to_all_items(world.session, companion.id, trip.id, owner.id)
    return owner, companion, trip, flight, hotel


async def test_consistent_cascade_has_no_orphans(world):
    await _trip_with_cascade(world)
    assert await find_orphaned_inherited_rows(world.session) == []
    assert await repair_orphaned_inherited_rows(world.session) == 0


async def test_membership_removed_without_cascade(world):
    owner, companion, trip, flight, hotel = await _trip_with_cascade(world)
    direct = await world.item("event", owner, trip)
    await world.item_member("event", direct, companion)
    companion_id, trip_id = companion.id, trip.id

    await world.session.execute(
        delete(TripCompanion).where(
            TripCompanion.trip_id == trip_id, TripCompanion.companion_id == companion_id
        )
    )

    orphans = await find_orphaned_inherited_rows(world.session)
    assert {(o.item_type, o.item_id) for o in orphans} == {("flight", flight.id), ("hotel", hotel.id)}

    assert await repair_orphaned_inherited_rows(world.session) == 2
    remaining = await world.item_rows(companion_id)
    assert [r.inherited_from_trip for r in remaining] == [False]


async def test_item_moved_out_of_trip(world):
    owner, companion, trip, flight, hotel = await _trip_with_cascade(world)
    flight.trip_id = None
    world.session.add(flight)
    await world.session.flush()

    orphans = await find_orphaned_inherited_rows(world.session)
    assert [(o.item_type, o.item_id) for o in orphans] == [("flight", flight.id)]
