"""ETL activities.

- fetch_geojson: HTTP GET with per-attempt deadline and linear-backoff retry
- normalize_geometry: expand collection / multi-part geometries into simple features
- resolve_identity: base ids from explicit ids or content hashes
"""
