"""Tagged variant over the geometry encodings found in source features.

``classify_geometry`` turns an untyped GeoJSON geometry object into one
of four frozen dataclasses:

- ``SimpleGeometry``      — Point, LineString or Polygon.
- ``MultiGeometry``       — any ``Multi*`` type; parts are expanded later.
- ``CollectionGeometry``  — ``GeometryCollection`` (one level only).
- ``UnsupportedGeometry`` — everything else (e.g. ``Circle``).

The normalizer matches exhaustively over ``SourceGeometry``.  Coordinate
arrays are carried through untouched; no validation or reprojection is
performed here.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from geojson_etl.core.constants import (
    GEOMETRY_COLLECTION,
    MULTI_PREFIX,
    SIMPLE_GEOMETRY_TYPES,
)


@dataclass(frozen=True, slots=True)
class SimpleGeometry:
    """A Point, LineString or Polygon.

    ``coordinates`` is ``None`` only for a source geometry that omitted
    them; such a geometry produces no output feature.
    """

    type: str
    coordinates: object = None

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type, "coordinates": self.coordinates}


@dataclass(frozen=True, slots=True)
class MultiGeometry:
    """A ``Multi*`` geometry whose ``coordinates`` is one entry per part."""

    type: str
    coordinates: list[object] | None = None

    @property
    def part_type(self) -> str:
        """The simple type of each part (``MultiPoint`` → ``Point``)."""
        return self.type.replace(MULTI_PREFIX, "", 1)


@dataclass(frozen=True, slots=True)
class CollectionGeometry:
    """A ``GeometryCollection``; members keep their raw mapping form."""

    geometries: list[object] | None = None

    @property
    def type(self) -> str:
        return GEOMETRY_COLLECTION


@dataclass(frozen=True, slots=True)
class UnsupportedGeometry:
    """A geometry whose type is none of the above."""

    type: str


SourceGeometry = SimpleGeometry | MultiGeometry | CollectionGeometry | UnsupportedGeometry


def classify_geometry(raw: object) -> SourceGeometry:
    """Classify a raw GeoJSON geometry object.

    A non-mapping, or a mapping without a string ``type``, is
    ``UnsupportedGeometry`` with an empty type name.
    """
    if not isinstance(raw, Mapping):
        return UnsupportedGeometry(type="")
    geom_type = raw.get("type")
    if not isinstance(geom_type, str):
        return UnsupportedGeometry(type="")

    if geom_type == GEOMETRY_COLLECTION:
        geometries = raw.get("geometries")
        return CollectionGeometry(geometries=geometries if isinstance(geometries, list) else None)

    if geom_type.startswith(MULTI_PREFIX):
        parts = raw.get("coordinates")
        return MultiGeometry(type=geom_type, coordinates=parts if isinstance(parts, list) else None)

    if geom_type in SIMPLE_GEOMETRY_TYPES:
        return SimpleGeometry(type=geom_type, coordinates=raw.get("coordinates"))

    return UnsupportedGeometry(type=geom_type)
