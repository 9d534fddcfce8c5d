"""GeoJSON ETL orchestrator — one run, start to finish.

1. Build the request URL (query params appended in order) and headers.
2. Fetch with per-attempt timeout and bounded retry.
3. Parse JSON and check the top-level ``type`` is ``FeatureCollection``.
4. For each source feature, in order: drop it when it has no geometry,
   otherwise resolve its base id and expand its geometry.
5. Submit the complete collection to the sink exactly once.

Submission is all-or-nothing: a fetch, parse or schema error raises
before anything reaches the sink.  Unsupported geometries are the only
recovered condition; they shrink the output and show up as warnings in
the ``RunSummary``.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING

import httpx

from geojson_etl.activities.fetch_geojson import fetch_with_retry, parse_json_body
from geojson_etl.activities.normalize_geometry import UnsupportedGeometryError, expand_geometry
from geojson_etl.activities.resolve_identity import resolve_base_id, strip_id
from geojson_etl.core.constants import FEATURE_COLLECTION
from geojson_etl.core.exceptions import ContractError, PipelineError
from geojson_etl.models.feature import FeatureCollection
from geojson_etl.models.geometry import classify_geometry

if TYPE_CHECKING:
    from collections.abc import Callable

    from geojson_etl.core.config import EtlConfig, KeyValue
    from geojson_etl.models.contracts import RunSummary, SourceFeatureCollectionPayload
    from geojson_etl.sinks.base import CollectionSink

logger = logging.getLogger("geojson_etl.orchestrators.geojson_pipeline")


class SchemaError(ContractError):
    """The response is not a FeatureCollection with a ``features`` list."""

    default_stage = "validate"
    default_code = "INVALID_FEATURE_COLLECTION"


def run_pipeline(
    config: EtlConfig,
    sink: CollectionSink,
    *,
    correlation_id: str = "",
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
    log: logging.Logger | None = None,
) -> RunSummary:
    """Fetch, normalize and submit one FeatureCollection.

    Args:
        config: Run configuration.
        sink: Receives the finished collection.
        correlation_id: Run identifier for logs and errors (generated if empty).
        transport: Optional httpx transport, forwarded to the fetcher.
        sleep: Backoff sleep, forwarded to the fetcher.
        log: Logger for the whole run.

    Returns:
        Counts and warnings for the run.

    Raises:
        FetchError: All fetch attempts failed.
        JSONParseError: The body is not JSON.
        SchemaError: The body is not a FeatureCollection.
        SinkError: The sink rejected the collection.
    """
    log = log or logger
    correlation_id = correlation_id or uuid.uuid4().hex
    url = build_request_url(config.url, config.query_params)

    log.info("Run started | correlation_id=%s | url=%s", correlation_id, url)

    try:
        body = fetch_with_retry(
            url,
            config.header_map,
            config.timeout_ms,
            config.retries,
            transport=transport,
            sleep=sleep,
            log=log,
        )
        source = validate_feature_collection(parse_json_body(body))
        collection, dropped, warnings = normalize_features(
            source["features"],
            remove_id=config.remove_id,
            log=log,
        )

        log.info("ok - obtained %d features", len(collection))
        sink.submit(collection)
    except PipelineError as exc:
        exc.correlation_id = exc.correlation_id or correlation_id
        log.error(
            "Run failed | correlation_id=%s | code=%s | error=%s",
            correlation_id,
            exc.code,
            exc,
        )
        raise

    for warning in warnings:
        warning.correlation_id = correlation_id

    log.info(
        "Run completed | correlation_id=%s | source=%d | dropped=%d | output=%d | warnings=%d",
        correlation_id,
        len(source["features"]),
        dropped,
        len(collection),
        len(warnings),
    )

    return {
        "correlation_id": correlation_id,
        "source_features": len(source["features"]),
        "dropped_features": dropped,
        "output_features": len(collection),
        "warnings": [w.to_error_dict() for w in warnings],
    }


def build_request_url(url: str, query_params: tuple[KeyValue, ...] = ()) -> str:
    """Append *query_params* to *url*'s query string, preserving order and duplicates."""
    request_url = httpx.URL(url)
    for param in query_params:
        request_url = request_url.copy_add_param(param.key, param.value)
    return str(request_url)


def validate_feature_collection(payload: object) -> SourceFeatureCollectionPayload:
    """Check the top-level response shape.

    Returns:
        The collection with its ``features`` list.

    Raises:
        SchemaError: If the payload is not an object, its ``type`` is not
            ``FeatureCollection``, or ``features`` is not a list.
    """
    if not isinstance(payload, Mapping):
        msg = f"Response must be a JSON object, got {type(payload).__name__}"
        raise SchemaError(msg)

    if payload.get("type") != FEATURE_COLLECTION:
        msg = f"Only FeatureCollection is supported, got type={payload.get('type')!r}"
        raise SchemaError(msg, code="UNSUPPORTED_COLLECTION_TYPE")

    features = payload.get("features")
    if not isinstance(features, list):
        msg = f"FeatureCollection.features must be a list, got {type(features).__name__}"
        raise SchemaError(msg, code="MISSING_FEATURES")

    return {"type": FEATURE_COLLECTION, "features": features}


def normalize_features(
    features: list[object],
    *,
    remove_id: bool = False,
    log: logging.Logger | None = None,
) -> tuple[FeatureCollection, int, list[UnsupportedGeometryError]]:
    """Run every source feature through identity resolution and expansion.

    Returns:
        The output collection, the number of dropped source features, and
        the warnings recorded for skipped geometries.
    """
    log = log or logger
    collection = FeatureCollection()
    warnings: list[UnsupportedGeometryError] = []
    dropped = 0

    for position, raw in enumerate(features):
        if not isinstance(raw, Mapping):
            log.warning(
                "Source feature is not an object, dropping | position=%d | type=%s",
                position,
                type(raw).__name__,
            )
            dropped += 1
            continue

        feature = strip_id(raw, remove_id)
        if not feature.get("geometry"):
            log.debug("Source feature has no geometry, dropping | position=%d", position)
            dropped += 1
            continue

        base_id = resolve_base_id(feature)
        properties = feature.get("properties")
        result = expand_geometry(
            classify_geometry(feature["geometry"]),
            base_id,
            dict(properties) if isinstance(properties, Mapping) else {},
            log=log,
        )
        collection.extend(result.features)
        warnings.extend(result.warnings)

    return collection, dropped, warnings
