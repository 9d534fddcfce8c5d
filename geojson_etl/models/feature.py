"""Output data model: normalized features and the collection handed to the sink.

A ``NormalizedFeature`` always carries exactly one simple geometry and
a deterministic id.  The source feature's properties are nested
unchanged under ``properties.metadata``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from geojson_etl.core.constants import FEATURE, FEATURE_COLLECTION

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from geojson_etl.models.contracts import FeatureCollectionPayload, NormalizedFeaturePayload
    from geojson_etl.models.geometry import SimpleGeometry


@dataclass(frozen=True, slots=True)
class NormalizedFeature:
    """A single simple-geometry feature ready for submission.

    Attributes:
        id: Base id, or base id plus ``-{i}`` / ``-gc-{i}`` suffix.
        geometry: Point, LineString or Polygon.
        metadata: The source feature's ``properties`` mapping.
    """

    id: str
    geometry: SimpleGeometry
    metadata: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> NormalizedFeaturePayload:
        return {
            "id": self.id,
            "type": FEATURE,
            "properties": {"metadata": self.metadata},
            "geometry": self.geometry.to_dict(),  # type: ignore[typeddict-item]
        }


@dataclass(slots=True)
class FeatureCollection:
    """Ordered accumulator of normalized features for one run."""

    features: list[NormalizedFeature] = field(default_factory=list)

    def extend(self, features: Iterable[NormalizedFeature]) -> None:
        self.features.extend(features)

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[NormalizedFeature]:
        return iter(self.features)

    @property
    def ids(self) -> list[str]:
        return [f.id for f in self.features]

    def to_dict(self) -> FeatureCollectionPayload:
        return {
            "type": FEATURE_COLLECTION,
            "features": [f.to_dict() for f in self.features],
        }

    def to_json(self) -> str:
        """Serialise to compact JSON.

        Key order follows insertion order, so identical input yields
        byte-identical output.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
