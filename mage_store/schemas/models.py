"""
Pydantic models for location payloads.

``LocationFeature`` is the GeoJSON Feature shape a location takes when it is
received from (or handed to) a synchronization collaborator.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from mage_store.core.exceptions import ErrorCodes, LocationValidationError

from .enums import FeatureType
from .geometry import Geometry

_datetime_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class LocationFeature(BaseModel):
    """
    A location observation as a GeoJSON Feature.

    ``id`` carries the remote identifier; ``properties.timestamp`` carries the
    observation time as ISO-8601.
    """

    type: str = FeatureType.FEATURE
    id: str | None = None
    geometry: Geometry | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def timestamp(self) -> datetime | None:
        """Observation time parsed from ``properties.timestamp``."""
        raw = self.properties.get("timestamp")
        if raw is None:
            return None
        try:
            return ensure_utc(_datetime_adapter.validate_python(raw))
        except PydanticValidationError as e:
            msg = f"Invalid timestamp {raw!r} on location {self.id!r}"
            raise LocationValidationError(msg, ErrorCodes.INVALID_FORMAT, {"remote_id": self.id}) from e


class LocationRead(BaseModel):
    """Read model for a stored location."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    remote_id: str | None = None
    type: str
    timestamp: datetime
    user_id: int | None = None
    geometry: Geometry | None = None
    properties: dict[str, Any] | None = None
