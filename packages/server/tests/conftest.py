"""
Shared fixtures: a file-backed SQLite database per test and settings overrides.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

import tripshare.models  # noqa: F401  (populate metadata)
from tripshare.core.config import get_settings
from tripshare.core.database import build_engine, init_db

from .factories import World


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tripshare.db'}")
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine):
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as s:
        yield s


@pytest.fixture
def world(session) -> World:
    return World(session)


@pytest.fixture
def settings_env(monkeypatch):
    """Override TRIPSHARE_* settings for one test."""

    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(f"TRIPSHARE_{key.upper()}", str(value))
        get_settings.cache_clear()

    yield _set
    get_settings.cache_clear()
