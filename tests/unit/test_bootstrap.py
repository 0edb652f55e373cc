"""
Tests for opening a store end to end.
"""

from __future__ import annotations

import pytest

from mage_store.bootstrap import open_store
from mage_store.db.models import User
from mage_store.schemas.models import LocationFeature
from mage_store.services.location_store import LocationStore


class TestOpenStore:
    """Tests for open_store."""

    @pytest.mark.asyncio
    async def test_open_store_round_trip(self, tmp_path, point_feature):
        url = f"sqlite+aiosqlite:///{tmp_path / 'device.db'}"

        engine, session_maker, config = await open_store(url)
        try:
            await config.set_server_url("https://mage.example.com")
            async with session_maker() as session:
                user = User(username="field-user")
                session.add(user)
                await LocationStore(session).upsert_feature(
                    LocationFeature.model_validate(point_feature),
                    user=user,
                )
                await session.commit()
        finally:
            await config.flush()
            await engine.dispose()

        engine, session_maker, config = await open_store(url)
        try:
            assert config.server_url == "https://mage.example.com"
            async with session_maker() as session:
                location = await LocationStore(session).get_by_remote_id("loc-1")
                assert location is not None
                assert location.user_id is not None
        finally:
            await engine.dispose()
