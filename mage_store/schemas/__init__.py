"""
Pydantic schemas for the MAGE local store.

This package contains the enums, the GeoJSON geometry union and the
location payload models shared by the db and services layers.
"""

from .enums import FeatureType, GeometryType, ServerSettingKey
from .geometry import (
    Geometry,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    parse_geometry,
)
from .models import LocationFeature, LocationRead, ensure_utc

__all__ = [
    # Enums
    "FeatureType",
    # Geometry
    "Geometry",
    "GeometryType",
    "LineString",
    # Locations
    "LocationFeature",
    "LocationRead",
    "MultiLineString",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "ServerSettingKey",
    "ensure_utc",
    "parse_geometry",
]
