"""Data models and wire contracts.

- geometry: Tagged source-geometry variant and ``classify_geometry``
- feature: ``NormalizedFeature`` and the output ``FeatureCollection``
- contracts: ``TypedDict`` shapes of the inbound and outbound JSON
"""

from geojson_etl.models.feature import FeatureCollection, NormalizedFeature
from geojson_etl.models.geometry import (
    CollectionGeometry,
    MultiGeometry,
    SimpleGeometry,
    SourceGeometry,
    UnsupportedGeometry,
    classify_geometry,
)

__all__ = [
    "CollectionGeometry",
    "FeatureCollection",
    "MultiGeometry",
    "NormalizedFeature",
    "SimpleGeometry",
    "SourceGeometry",
    "UnsupportedGeometry",
    "classify_geometry",
]
