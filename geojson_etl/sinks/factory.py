"""Sink factory — builds the configured ``CollectionSink``.

Concrete sinks are imported lazily so that ``azure-storage-blob`` is
only loaded when the blob sink is selected.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from geojson_etl.core.config import ConfigValidationError

if TYPE_CHECKING:
    from geojson_etl.core.config import EtlConfig
    from geojson_etl.sinks.base import CollectionSink

logger = logging.getLogger("geojson_etl.sinks.factory")

BLOB = "blob"
LOCAL = "local"


def get_sink(config: EtlConfig) -> CollectionSink:
    """Create the sink named by ``config.sink``.

    Raises:
        ConfigValidationError: If the sink name is unknown.
    """
    if config.sink == BLOB:
        from geojson_etl.sinks.blob import BlobCollectionSink

        logger.info(
            "Using blob sink | container=%s | blob=%s",
            config.output_container,
            config.output_blob,
        )
        return BlobCollectionSink(config.output_container, config.output_blob)

    if config.sink == LOCAL:
        from geojson_etl.sinks.local import LocalFileSink

        logger.info("Using local sink | path=%s", config.output_path)
        return LocalFileSink(config.output_path)

    raise ConfigValidationError("Sink", config.sink, f"unknown sink (expected {BLOB} or {LOCAL})")
