"""Pipeline orchestration.

- geojson_pipeline: fetch → validate → normalize → submit, for one run
"""
