"""Shared constants for the GeoJSON ETL.

Geometry type names, id suffix tokens and configuration defaults live
here so the normalizer, orchestrator and config agree on spelling.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# GeoJSON type names
# ---------------------------------------------------------------------------

FEATURE_COLLECTION = "FeatureCollection"
FEATURE = "Feature"
GEOMETRY_COLLECTION = "GeometryCollection"

POINT = "Point"
LINE_STRING = "LineString"
POLYGON = "Polygon"

SIMPLE_GEOMETRY_TYPES: frozenset[str] = frozenset({POINT, LINE_STRING, POLYGON})
"""The only geometry types allowed in the output collection."""

MULTI_PREFIX = "Multi"
"""Prefix stripped from ``MultiPoint`` etc. to obtain the per-part type."""

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

COLLECTION_ID_TOKEN = "gc"
"""Expanded collection members are identified as ``{base}-gc-{index}``."""

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_STEP_MS = 1_000
"""Linear backoff: wait ``step × (attempt + 1)`` after a failed attempt."""

DEFAULT_SINK = "blob"
DEFAULT_OUTPUT_CONTAINER = "geojson-output"
DEFAULT_OUTPUT_BLOB = "features.geojson"

GEOJSON_CONTENT_TYPE = "application/geo+json"

SUPPORTED_SINKS: frozenset[str] = frozenset({"blob", "local"})
