"""Wire contracts for the GeoJSON consumed and produced by the ETL.

``TypedDict`` is used because both ends of the pipeline are plain JSON:
the remote endpoint's response and the collection handed to the sink.
Inbound shapes use ``total=False`` because the remote side is not
trusted to send every key.
"""

from __future__ import annotations

from typing import TypedDict

# ---------------------------------------------------------------------------
# Inbound (remote endpoint → orchestrator)
# ---------------------------------------------------------------------------


class SourceGeometryPayload(TypedDict, total=False):
    """A raw geometry object; which keys are present depends on ``type``."""

    type: str
    coordinates: list[object]
    geometries: list[dict[str, object]]


class SourceFeaturePayload(TypedDict, total=False):
    """A raw feature. ``id`` and ``geometry`` are optional."""

    id: str | int
    type: str
    geometry: SourceGeometryPayload | None
    properties: dict[str, object] | None


class SourceFeatureCollectionPayload(TypedDict, total=False):
    """Top-level response body. ``type`` must be ``FeatureCollection``."""

    type: str
    features: list[SourceFeaturePayload]


# ---------------------------------------------------------------------------
# Outbound (orchestrator → sink)
# ---------------------------------------------------------------------------


class SimpleGeometryPayload(TypedDict):
    """Point, LineString or Polygon."""

    type: str
    coordinates: object


class NormalizedPropertiesPayload(TypedDict):
    """The source feature's properties, nested under ``metadata``."""

    metadata: dict[str, object]


class NormalizedFeaturePayload(TypedDict):
    """Serialised ``NormalizedFeature``."""

    id: str
    type: str
    properties: NormalizedPropertiesPayload
    geometry: SimpleGeometryPayload


class FeatureCollectionPayload(TypedDict):
    """Serialised output ``FeatureCollection`` handed to the sink."""

    type: str
    features: list[NormalizedFeaturePayload]


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------


class RunSummary(TypedDict):
    """Result of ``run_pipeline`` after a successful submission."""

    correlation_id: str
    source_features: int
    dropped_features: int
    output_features: int
    warnings: list[dict[str, object]]
