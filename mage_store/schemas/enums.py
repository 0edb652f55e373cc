"""
String enums for the MAGE local store.

These enums are the single source of truth for string constants.
"""

from enum import StrEnum


class GeometryType(StrEnum):
    """GeoJSON geometry type names."""

    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"


class FeatureType(StrEnum):
    """Record kinds stored in ``Location.type``."""

    FEATURE = "Feature"


class ServerSettingKey(StrEnum):
    """Keys held by the server settings store."""

    SERVER_URL = "serverUrl"
    CURRENT_EVENT_ID = "currentEventId"
