"""
SQLAlchemy ORM models for the MAGE local store.

Database schema with tables for:
- Users (owners of location observations)
- Locations (observed positions as GeoJSON, owned by at most one user)
- ServerSettings (process-wide key/value settings such as the server URL)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from mage_store.schemas.enums import FeatureType
from mage_store.schemas.geometry import Geometry, parse_geometry
from mage_store.schemas.models import LocationFeature


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime that always loads as UTC (SQLite drops tzinfo)."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """A user that location observations belong to."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    remote_id: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    locations: Mapped[list[Location]] = relationship("Location", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class Location(Base):
    """
    A single location observation.

    ``geometry`` and ``properties`` are stored as JSON and either may be
    absent; ``geometry`` is exposed as a validated GeoJSON model.
    ``remote_id`` is None until the record has been synced and is unique
    when present.
    """

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    remote_id: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    type: Mapped[str] = mapped_column(String(50), default=FeatureType.FEATURE, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    geometry_json: Mapped[dict[str, Any] | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    properties_json: Mapped[dict[str, Any] | None] = mapped_column(MutableDict.as_mutable(JSON), nullable=True)
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    user: Mapped[User | None] = relationship("User", back_populates="locations")

    __table_args__ = (Index("ix_locations_user_timestamp", "user_id", "timestamp"),)

    @property
    def geometry(self) -> Geometry | None:
        if self.geometry_json is None:
            return None
        return parse_geometry(self.geometry_json)

    @geometry.setter
    def geometry(self, value: Geometry | dict[str, Any] | None) -> None:
        self.geometry_json = parse_geometry(value).to_geojson() if value is not None else None

    @property
    def properties(self) -> dict[str, Any] | None:
        return self.properties_json

    @properties.setter
    def properties(self, value: dict[str, Any] | None) -> None:
        # Stored as a copy; in-place edits through .properties are tracked
        self.properties_json = dict(value) if value is not None else None

    def to_feature(self) -> LocationFeature:
        """Render this location as a GeoJSON Feature."""
        return LocationFeature(
            type=self.type,
            id=self.remote_id,
            geometry=self.geometry,
            properties=dict(self.properties_json or {}),
        )

    def __repr__(self) -> str:
        return f"<Location id={self.id} remote_id={self.remote_id!r} timestamp={self.timestamp}>"


class ServerSetting(Base):
    """
    Durable copy of one server settings key.

    ``write_sequence`` orders writes: a row is only replaced by a write
    stamped with a larger sequence.
    """

    __tablename__ = "server_settings"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value_json: Mapped[Any] = mapped_column(JSON(none_as_null=True), nullable=True)
    write_sequence: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
