"""Tests for the SQLite database layer (autobrowse/db.py)."""

from __future__ import annotations

import aiosqlite
import pytest

from autobrowse.db import close_db, get_db, init_db


@pytest.mark.asyncio
async def test_init_creates_tables():
    """init_db should create the auto_auth table."""
    db = await init_db()
    try:
        cursor = await db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        tables = [row[0] for row in await cursor.fetchall()]
        assert "auto_auth" in tables
    finally:
        await close_db()


@pytest.mark.asyncio
async def test_get_db_before_init_raises():
    """get_db should raise RuntimeError if called before init_db."""
    # Ensure db is closed from any prior test.
    await close_db()
    with pytest.raises(RuntimeError, match="not initialised"):
        get_db()


@pytest.mark.asyncio
async def test_auto_auth_is_single_row():
    """auto_auth only accepts id = 1."""
    db = await init_db()
    try:
        await db.execute(
            "INSERT INTO auto_auth (id, base_url, api_key, access_token) VALUES (1, 'u', 'k', 't')"
        )
        await db.commit()

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute(
                "INSERT INTO auto_auth (id, base_url, api_key, access_token) VALUES (2, 'u', 'k', 't')"
            )
            await db.commit()
    finally:
        await close_db()


@pytest.mark.asyncio
async def test_db_file_lives_at_configured_path(tmp_path):
    await init_db()
    try:
        assert (tmp_path / "test.db").exists()
    finally:
        await close_db()
