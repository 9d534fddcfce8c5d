"""Shared pytest fixtures for the GeoJSON ETL test suite."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable

import httpx
import pytest

from geojson_etl.core.config import EtlConfig
from geojson_etl.models.feature import FeatureCollection
from geojson_etl.sinks.base import CollectionSink

SOURCE_URL = "https://example.com/features.geojson"

# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

_MIXED_COLLECTION: dict[str, object] = {
    "type": "FeatureCollection",
    "features": [
        {
            "id": "station-1",
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [-105.0, 39.7]},
            "properties": {"name": "Station 1"},
        },
        {
            "id": "hydrants",
            "type": "Feature",
            "geometry": {"type": "MultiPoint", "coordinates": [[-105.1, 39.8], [-105.2, 39.9]]},
            "properties": {"name": "Hydrants"},
        },
        {
            "id": "incident",
            "type": "Feature",
            "geometry": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Point", "coordinates": [-105.3, 40.0]},
                    {"type": "Circle", "coordinates": [-105.3, 40.0]},
                ],
            },
            "properties": {"name": "Incident"},
        },
        {
            "id": "radius",
            "type": "Feature",
            "geometry": {"type": "Circle", "coordinates": [-105.4, 40.1]},
            "properties": {"name": "Radius"},
        },
    ],
}


@pytest.fixture()
def mixed_collection() -> dict[str, object]:
    """Point, MultiPoint(2), GeometryCollection(Point + Circle), Circle."""
    return copy.deepcopy(_MIXED_COLLECTION)


@pytest.fixture()
def base_config() -> EtlConfig:
    """Minimal valid config pointing at ``SOURCE_URL``."""
    return EtlConfig(url=SOURCE_URL)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class RecordingSink(CollectionSink):
    """Sink that keeps every submitted collection in memory."""

    name = "recording"

    def __init__(self) -> None:
        self.submitted: list[FeatureCollection] = []

    def submit(self, collection: FeatureCollection) -> None:
        self.submitted.append(collection)


@pytest.fixture()
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def json_transport() -> Callable[[object], httpx.MockTransport]:
    """Factory for a MockTransport that always answers 200 with a JSON payload."""

    def build(payload: object) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=json.dumps(payload).encode("utf-8"))

        return httpx.MockTransport(handler)

    return build
