"""Geometry normalization — flatten one source geometry into simple features.

Expansion rules for a base id ``B``:

- ``GeometryCollection``: member ``i`` becomes ``B-gc-{i}``.  Indices
  count skipped members too, so unsupported members leave gaps.
- ``Multi*``: part ``i`` becomes ``B-{i}`` with the de-prefixed type.
- Point / LineString / Polygon: one feature with id ``B``.
- Anything else: no feature.

Unsupported members, parts and geometries are skipped and recorded as
``UnsupportedGeometryError`` warnings; they never abort a run.  Only one
level of collection is expanded: a collection nested in a collection is
an unsupported member.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import assert_never

from geojson_etl.core.constants import COLLECTION_ID_TOKEN, SIMPLE_GEOMETRY_TYPES
from geojson_etl.core.exceptions import ValidationError
from geojson_etl.models.feature import NormalizedFeature
from geojson_etl.models.geometry import (
    CollectionGeometry,
    MultiGeometry,
    SimpleGeometry,
    SourceGeometry,
    UnsupportedGeometry,
)

logger = logging.getLogger("geojson_etl.activities.normalize_geometry")


class UnsupportedGeometryError(ValidationError):
    """A geometry, collection member or multi-part part that cannot be emitted.

    Recorded as a warning rather than raised out of a run.

    Attributes:
        geometry_type: The offending type name (may be empty).
        feature_id: Base id of the source feature.
        index: Member/part index, or ``None`` for a top-level geometry.
    """

    default_stage = "normalize"
    default_code = "UNSUPPORTED_GEOMETRY"

    def __init__(
        self,
        message: str,
        *,
        geometry_type: str = "",
        feature_id: str = "",
        index: int | None = None,
    ) -> None:
        self.geometry_type = geometry_type
        self.feature_id = feature_id
        self.index = index
        super().__init__(message)

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload.update(
            geometry_type=self.geometry_type,
            feature_id=self.feature_id,
            index=self.index,
        )
        return payload


@dataclass(slots=True)
class NormalizationResult:
    """Features emitted for one source geometry plus skipped-geometry warnings."""

    features: list[NormalizedFeature] = field(default_factory=list)
    warnings: list[UnsupportedGeometryError] = field(default_factory=list)


def create_simple_geometry(geom_type: str, coordinates: object) -> SimpleGeometry | None:
    """Return a simple geometry, or ``None`` when *geom_type* is not supported."""
    if geom_type in SIMPLE_GEOMETRY_TYPES:
        return SimpleGeometry(type=geom_type, coordinates=coordinates)
    return None


def expand_geometry(
    geometry: SourceGeometry,
    base_id: str,
    properties: dict[str, object],
    *,
    log: logging.Logger | None = None,
) -> NormalizationResult:
    """Expand *geometry* into zero or more ``NormalizedFeature`` objects.

    Args:
        geometry: Classified source geometry.
        base_id: Identifier of the enclosing source feature.
        properties: Source properties, nested under ``metadata`` in the output.
        log: Logger receiving one warning per skipped geometry.

    Returns:
        Features in member/part order, and the warnings recorded.
    """
    log = log or logger
    result = NormalizationResult()

    match geometry:
        case CollectionGeometry():
            _expand_collection(geometry, base_id, properties, result, log)
        case MultiGeometry():
            _expand_multi(geometry, base_id, properties, result, log)
        case SimpleGeometry():
            if geometry.coordinates is not None:
                result.features.append(
                    NormalizedFeature(id=base_id, geometry=geometry, metadata=properties)
                )
            else:
                log.debug("Geometry has no coordinates, skipping | feature=%s", base_id)
        case UnsupportedGeometry():
            _warn(
                result,
                log,
                f"Unsupported geometry type: {geometry.type}",
                geometry_type=geometry.type,
                feature_id=base_id,
            )
        case _:
            assert_never(geometry)

    return result


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _expand_collection(
    geometry: CollectionGeometry,
    base_id: str,
    properties: dict[str, object],
    result: NormalizationResult,
    log: logging.Logger,
) -> None:
    if geometry.geometries is None:
        _warn(
            result,
            log,
            "GeometryCollection has no geometries",
            geometry_type=geometry.type,
            feature_id=base_id,
        )
        return

    for idx, member in enumerate(geometry.geometries):
        member_type = ""
        coordinates = None
        if isinstance(member, Mapping):
            member_type = str(member.get("type") or "")
            coordinates = member.get("coordinates")

        simple = create_simple_geometry(member_type, coordinates)
        if simple is None:
            _warn(
                result,
                log,
                f"Unsupported geometry type in GeometryCollection: {member_type}",
                geometry_type=member_type,
                feature_id=base_id,
                index=idx,
            )
            continue
        if coordinates is None:
            _warn(
                result,
                log,
                f"GeometryCollection member has no coordinates: {member_type}",
                geometry_type=member_type,
                feature_id=base_id,
                index=idx,
            )
            continue

        result.features.append(
            NormalizedFeature(
                id=f"{base_id}-{COLLECTION_ID_TOKEN}-{idx}",
                geometry=simple,
                metadata=properties,
            )
        )


def _expand_multi(
    geometry: MultiGeometry,
    base_id: str,
    properties: dict[str, object],
    result: NormalizationResult,
    log: logging.Logger,
) -> None:
    if geometry.coordinates is None:
        log.debug("Multi-part geometry has no coordinates, skipping | feature=%s", base_id)
        return

    part_type = geometry.part_type
    for idx, part in enumerate(geometry.coordinates):
        simple = create_simple_geometry(part_type, part)
        if simple is None:
            _warn(
                result,
                log,
                f"Unsupported geometry type in {geometry.type}: {part_type}",
                geometry_type=geometry.type,
                feature_id=base_id,
                index=idx,
            )
            continue
        result.features.append(
            NormalizedFeature(id=f"{base_id}-{idx}", geometry=simple, metadata=properties)
        )


def _warn(
    result: NormalizationResult,
    log: logging.Logger,
    message: str,
    *,
    geometry_type: str,
    feature_id: str,
    index: int | None = None,
) -> None:
    warning = UnsupportedGeometryError(
        message,
        geometry_type=geometry_type,
        feature_id=feature_id,
        index=index,
    )
    result.warnings.append(warning)
    log.warning("%s | feature=%s | index=%s", message, feature_id, index)
