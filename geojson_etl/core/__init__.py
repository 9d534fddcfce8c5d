"""Core utilities and shared infrastructure.

- config: Run configuration loading, validation and JSON Schema
- constants: Geometry type names, id suffixes, defaults
- exceptions: Custom exception hierarchy
"""
