"""Downstream sinks that accept the finished FeatureCollection.

The orchestrator only knows the ``CollectionSink`` interface; concrete
sinks are chosen by name via ``get_sink``.
"""

from geojson_etl.sinks.base import CollectionSink, SinkError
from geojson_etl.sinks.factory import get_sink

__all__ = [
    "CollectionSink",
    "SinkError",
    "get_sink",
]
