"""Azure Blob Storage sink.

Uploads the collection as a single GeoJSON blob, overwriting the blob
written by the previous run.  The client is created from the
``AzureWebJobsStorage`` connection string unless one is injected.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from geojson_etl.core.constants import GEOJSON_CONTENT_TYPE
from geojson_etl.sinks.base import CollectionSink, SinkError

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient

    from geojson_etl.models.feature import FeatureCollection

logger = logging.getLogger("geojson_etl.sinks.blob")


def get_blob_service_client() -> BlobServiceClient:
    """Create a ``BlobServiceClient`` from the ``AzureWebJobsStorage`` env var.

    Raises:
        SinkError: If the environment variable is not set.
    """
    from azure.storage.blob import BlobServiceClient

    connection_string = os.environ.get("AzureWebJobsStorage", "")  # noqa: SIM112
    if not connection_string:
        msg = "AzureWebJobsStorage environment variable is not set"
        raise SinkError("blob", msg)

    return BlobServiceClient.from_connection_string(connection_string)


class BlobCollectionSink(CollectionSink):
    """Write the collection to ``{container}/{blob_name}``."""

    name = "blob"

    def __init__(
        self,
        container: str,
        blob_name: str,
        *,
        service_client: BlobServiceClient | None = None,
    ) -> None:
        self._container = container
        self._blob_name = blob_name
        self._service_client = service_client

    def submit(self, collection: FeatureCollection) -> None:
        from azure.core.exceptions import AzureError
        from azure.storage.blob import ContentSettings

        client = self._service_client or get_blob_service_client()
        data = collection.to_json().encode("utf-8")
        try:
            blob_client = client.get_blob_client(container=self._container, blob=self._blob_name)
            blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=GEOJSON_CONTENT_TYPE),
            )
        except AzureError as exc:
            msg = f"Upload to {self._container}/{self._blob_name} failed: {exc}"
            raise SinkError(self.name, msg) from exc

        logger.info(
            "Collection uploaded | container=%s | blob=%s | features=%d | size=%d bytes",
            self._container,
            self._blob_name,
            len(collection),
            len(data),
        )
