"""Pytest configuration and fixtures for relate_orm.

Every test using ``db`` gets a fresh SQLite file with all registered
entities synced, plus an attached ``archive`` database for schema tests.
"""

import pytest

from relate_orm import db_context

from tests.models import SAVE_LOG


@pytest.fixture
async def db(tmp_path):
    """db_context bound to a temporary database, schema already created."""
    ctx = db_context(
        str(tmp_path / "test.sqlite"),
        sync_schema=True,
        attach={"archive": str(tmp_path / "archive.sqlite")},
    )
    await ctx.initialize()
    SAVE_LOG.clear()
    return ctx


@pytest.fixture
def statements():
    """Collects SQL statements; pass ``logging=statements.append`` to an operation."""
    return []
