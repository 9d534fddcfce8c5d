"""GeoJSON ETL.

Scheduled task that fetches a remote GeoJSON ``FeatureCollection``,
flattens multi-part and collection geometries into simple Point,
LineString and Polygon features with deterministic ids, and submits
the normalized collection to a downstream sink.
"""

__version__ = "0.1.0"
