"""Tests for the dialect-aware duplicate-ignoring insert."""

from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest

from tripshare.core.database import insert_ignore_duplicates
from tripshare.core.errors import ConfigurationError
from tripshare.models import ItemCompanion, User


def _session_on(dialect: str):
    return SimpleNamespace(get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name=dialect)))


async def test_unsupported_dialect_is_configuration_error():
    with pytest.raises(ConfigurationError, match="mysql"):
        await insert_ignore_duplicates(
            _session_on("mysql"), ItemCompanion, [{"id": uuid.uuid4()}], ("id",)
        )


async def test_no_rows_skips_dialect_check():
    assert await insert_ignore_duplicates(_session_on("mysql"), ItemCompanion, [], ("id",)) is None


async def test_duplicates_are_skipped_on_sqlite(session):
    user_id = uuid.uuid4()
    row = {"id": user_id, "email": "dup@example.com", "first_name": "Dup"}
    await insert_ignore_duplicates(session, User, [row], ("email",))
    await insert_ignore_duplicates(session, User, [{**row, "id": uuid.uuid4()}], ("email",))

    assert (await session.get(User, user_id)).email == "dup@example.com"
