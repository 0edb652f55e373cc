"""
GeoJSON geometry models.

Each geometry kind is its own frozen Pydantic model; ``Geometry`` is the
tagged union of all of them, discriminated on ``type``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from mage_store.core.exceptions import ErrorCodes, GeometryValidationError

# [longitude, latitude] or [longitude, latitude, altitude]
Position = Annotated[list[float], Field(min_length=2, max_length=3)]


def _check_position(position: list[float]) -> list[float]:
    lon, lat = position[0], position[1]
    if not -180.0 <= lon <= 180.0:
        msg = f"longitude {lon} out of range [-180, 180]"
        raise ValueError(msg)
    if not -90.0 <= lat <= 90.0:
        msg = f"latitude {lat} out of range [-90, 90]"
        raise ValueError(msg)
    return position


def _check_ring(ring: list[list[float]]) -> list[list[float]]:
    if len(ring) < 4:
        msg = "linear ring needs at least 4 positions"
        raise ValueError(msg)
    if ring[0] != ring[-1]:
        msg = "linear ring must be closed (first position equals last)"
        raise ValueError(msg)
    return ring


class _GeometryBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_geojson(self) -> dict[str, Any]:
        """Serialize to a plain GeoJSON mapping."""
        return self.model_dump(mode="json")


class Point(_GeometryBase):
    type: Literal["Point"] = "Point"
    coordinates: Position

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[float]) -> list[float]:
        return _check_position(v)

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    @property
    def altitude(self) -> float | None:
        return self.coordinates[2] if len(self.coordinates) > 2 else None


class LineString(_GeometryBase):
    type: Literal["LineString"] = "LineString"
    coordinates: Annotated[list[Position], Field(min_length=2)]

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[list[float]]) -> list[list[float]]:
        return [_check_position(p) for p in v]


class Polygon(_GeometryBase):
    """Polygon; the first ring is the exterior, the rest are holes."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: Annotated[list[list[Position]], Field(min_length=1)]

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[list[list[float]]]) -> list[list[list[float]]]:
        return [_check_ring([_check_position(p) for p in ring]) for ring in v]


class MultiPoint(_GeometryBase):
    type: Literal["MultiPoint"] = "MultiPoint"
    coordinates: list[Position]

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[list[float]]) -> list[list[float]]:
        return [_check_position(p) for p in v]


class MultiLineString(_GeometryBase):
    type: Literal["MultiLineString"] = "MultiLineString"
    coordinates: list[Annotated[list[Position], Field(min_length=2)]]

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[list[list[float]]]) -> list[list[list[float]]]:
        return [[_check_position(p) for p in line] for line in v]


class MultiPolygon(_GeometryBase):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: list[Annotated[list[list[Position]], Field(min_length=1)]]

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[list[list[list[float]]]]) -> list[list[list[list[float]]]]:
        return [[_check_ring([_check_position(p) for p in ring]) for ring in polygon] for polygon in v]


Geometry = Annotated[
    Union[Point, LineString, Polygon, MultiPoint, MultiLineString, MultiPolygon],
    Field(discriminator="type"),
]

_geometry_adapter: TypeAdapter[Geometry] = TypeAdapter(Geometry)


def parse_geometry(data: Any) -> Geometry:
    """
    Validate a GeoJSON geometry mapping (or pass through a geometry model).

    Raises:
        GeometryValidationError: If the payload is not a supported geometry.

    """
    if isinstance(data, _GeometryBase):
        return data
    try:
        return _geometry_adapter.validate_python(data)
    except PydanticValidationError as e:
        msg = f"Invalid geometry: {e.error_count()} validation error(s)"
        raise GeometryValidationError(msg, ErrorCodes.INVALID_FORMAT, {"errors": e.errors(include_url=False)}) from e
