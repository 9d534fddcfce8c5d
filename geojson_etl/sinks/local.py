"""Local file sink for development runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from geojson_etl.sinks.base import CollectionSink, SinkError

if TYPE_CHECKING:
    from geojson_etl.models.feature import FeatureCollection

logger = logging.getLogger("geojson_etl.sinks.local")


class LocalFileSink(CollectionSink):
    """Write the collection to a file, creating parent directories."""

    name = "local"

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    def submit(self, collection: FeatureCollection) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(collection.to_json(), encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {self._path}: {exc}"
            raise SinkError(self.name, msg) from exc

        logger.info("Collection written | path=%s | features=%d", self._path, len(collection))
