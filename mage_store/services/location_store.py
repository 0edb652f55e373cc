"""
Location entity operations.

Creates, re-syncs, reassigns and expires ``Location`` rows within a caller
owned AsyncSession. Methods flush but never commit; the caller decides the
transaction boundary.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mage_store.core.exceptions import (
    DatabaseError,
    DataIntegrityError,
    ErrorCodes,
    LocationValidationError,
)
from mage_store.db.models import Location, User
from mage_store.schemas.models import LocationFeature, ensure_utc

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class LocationStore:
    """Entity operations for locations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncGenerator[None, None]:
        """Translate SQLAlchemy failures into store exceptions."""
        try:
            yield
        except IntegrityError as e:
            logger.exception("Location %s violated an integrity constraint", operation)
            await self.session.rollback()
            msg = f"Location {operation} violated an integrity constraint: {e.orig}"
            raise DataIntegrityError(msg, ErrorCodes.DB_INTEGRITY_VIOLATION) from e
        except SQLAlchemyError as e:
            logger.exception("Location %s failed", operation)
            await self.session.rollback()
            msg = f"Location {operation} failed: {e}"
            raise DatabaseError(msg, ErrorCodes.DB_QUERY_FAILED) from e

    async def add(self, location: Location) -> Location:
        async with self._guard("insert"):
            self.session.add(location)
            await self.session.flush()
        return location

    async def upsert_feature(self, feature: LocationFeature, user: User | None = None) -> Location:
        """
        Store a received location feature.

        Matches an existing row on the feature id (remote id) and updates it,
        otherwise inserts a new row. A given ``user`` becomes the owner; with
        no user an existing owner is kept.

        Raises:
            LocationValidationError: If the feature has no timestamp.
            DataIntegrityError: If the write conflicts with another row.

        """
        timestamp = feature.timestamp
        if timestamp is None:
            msg = f"Location {feature.id!r} has no timestamp"
            raise LocationValidationError(msg, ErrorCodes.MISSING_REQUIRED, {"remote_id": feature.id})

        location = await self.get_by_remote_id(feature.id) if feature.id is not None else None

        async with self._guard("upsert"):
            if location is None:
                location = Location(
                    remote_id=feature.id,
                    type=feature.type,
                    timestamp=timestamp,
                    geometry=feature.geometry,
                    properties=feature.properties,
                    user=user,
                )
                self.session.add(location)
                logger.debug("Inserting location %r", feature.id)
            else:
                location.type = feature.type
                location.timestamp = timestamp
                location.geometry = feature.geometry
                location.properties = feature.properties
                if user is not None:
                    location.user = user
                logger.debug("Updating location %r", feature.id)
            await self.session.flush()

        return location

    async def get(self, location_id: int) -> Location | None:
        async with self._guard("lookup"):
            return await self.session.get(Location, location_id)

    async def get_by_remote_id(self, remote_id: str) -> Location | None:
        async with self._guard("lookup"):
            result = await self.session.execute(select(Location).where(Location.remote_id == remote_id))
            return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> list[Location]:
        """Locations owned by ``user_id``, newest first."""
        async with self._guard("query"):
            result = await self.session.execute(
                select(Location)
                .where(Location.user_id == user_id)
                .order_by(Location.timestamp.desc(), Location.id.desc())
            )
            return list(result.scalars().all())

    async def latest_for_user(self, user_id: int) -> Location | None:
        async with self._guard("query"):
            result = await self.session.execute(
                select(Location)
                .where(Location.user_id == user_id)
                .order_by(Location.timestamp.desc(), Location.id.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def assign_user(self, location: Location, user: User | None) -> Location:
        """Move ``location`` to ``user`` (or detach it with None)."""
        async with self._guard("reassign"):
            location.user = user
            await self.session.flush()
        return location

    async def delete(self, location: Location) -> None:
        async with self._guard("delete"):
            await self.session.delete(location)
            await self.session.flush()

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete locations observed before ``cutoff``; returns the number removed."""
        async with self._guard("retention sweep"):
            result = await self.session.execute(delete(Location).where(Location.timestamp < ensure_utc(cutoff)))
        removed = result.rowcount or 0
        logger.info("Removed %d locations older than %s", removed, cutoff.isoformat())
        return removed
