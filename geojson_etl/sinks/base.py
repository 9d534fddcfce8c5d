"""CollectionSink abstract base class.

A sink receives the complete output collection of a run exactly once.
It must not assume the collection is transformed further; it stores or
forwards it as-is.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from geojson_etl.core.exceptions import PermanentError

if TYPE_CHECKING:
    from geojson_etl.models.feature import FeatureCollection


class CollectionSink(abc.ABC):
    """Abstract downstream submit interface."""

    name: str = ""

    @abc.abstractmethod
    def submit(self, collection: FeatureCollection) -> None:
        """Hand over the finished collection.

        Raises:
            SinkError: If the collection could not be stored.
        """


class SinkError(PermanentError):
    """Submission to a sink failed.

    Attributes:
        sink: Name of the sink that raised the error.
    """

    default_stage = "submit"
    default_code = "SINK_SUBMIT_FAILED"

    def __init__(self, sink: str, message: str) -> None:
        self.sink = sink
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.sink}] {self.message}"
