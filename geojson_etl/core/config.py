"""Run configuration for the GeoJSON ETL.

An ``EtlConfig`` is built once at the start of a run and passed
explicitly to every component.  Two sources are supported:

- ``from_dict()`` — the task-environment shape (``URL``, ``QueryParams``,
  ``Headers``, ``RemoveID``, ``Timeout``, ``Retries``) used by the
  scheduler that owns this task.
- ``from_env()`` — ``GEOJSON_*`` app settings (Azure Functions or a
  local shell).

Both apply the same defaults and the same fail-fast validation:
``ConfigValidationError`` is raised before any network traffic happens.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlparse

from geojson_etl.core.constants import (
    DEFAULT_OUTPUT_BLOB,
    DEFAULT_OUTPUT_CONTAINER,
    DEFAULT_RETRIES,
    DEFAULT_SINK,
    DEFAULT_TIMEOUT_MS,
    SUPPORTED_SINKS,
)
from geojson_etl.core.exceptions import PipelineError


class ConfigValidationError(PipelineError):
    """Raised when a configuration value is missing or out of range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class KeyValue:
    """A single query parameter or header entry."""

    key: str
    value: str


@dataclass(frozen=True, slots=True)
class EtlConfig:
    """Immutable configuration for a single ETL run.

    Attributes:
        url: Base endpoint for the GET request.
        query_params: Appended to the URL query string, in order.
        headers: Request headers; a later duplicate key wins.
        remove_id: Strip source feature ids before identity assignment.
        timeout_ms: Per-attempt network deadline in milliseconds.
        retries: Additional attempts after the first failure.
        sink: Downstream sink name (``blob`` or ``local``).
        output_container: Blob container for the ``blob`` sink.
        output_blob: Blob name for the ``blob`` sink.
        output_path: File path for the ``local`` sink.
    """

    url: str
    query_params: tuple[KeyValue, ...] = ()
    headers: tuple[KeyValue, ...] = ()
    remove_id: bool = False
    timeout_ms: float = DEFAULT_TIMEOUT_MS
    retries: int = DEFAULT_RETRIES
    sink: str = DEFAULT_SINK
    output_container: str = DEFAULT_OUTPUT_CONTAINER
    output_blob: str = DEFAULT_OUTPUT_BLOB
    output_path: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> EtlConfig:
        """Build a config from the task-environment mapping.

        Raises:
            ConfigValidationError: On a missing URL, a malformed
                key/value list or an out-of-range number.
        """
        config = cls(
            url=str(data.get("URL") or ""),
            query_params=_key_values("QueryParams", data.get("QueryParams")),
            headers=_key_values("Headers", data.get("Headers")),
            remove_id=_as_bool("RemoveID", data.get("RemoveID", False)),
            timeout_ms=_as_number("Timeout", data.get("Timeout", DEFAULT_TIMEOUT_MS)),
            retries=_as_int("Retries", data.get("Retries", DEFAULT_RETRIES)),
            sink=str(data.get("Sink") or DEFAULT_SINK),
            output_container=str(data.get("OutputContainer") or DEFAULT_OUTPUT_CONTAINER),
            output_blob=str(data.get("OutputBlob") or DEFAULT_OUTPUT_BLOB),
            output_path=str(data.get("OutputPath") or ""),
        )
        _validate(config)
        return config

    @classmethod
    def from_env(cls) -> EtlConfig:
        """Load and validate configuration from ``GEOJSON_*`` environment variables.

        ``GEOJSON_QUERY_PARAMS`` and ``GEOJSON_HEADERS`` hold JSON lists
        of ``{"key": ..., "value": ...}`` objects.

        Raises:
            ConfigValidationError: If a value is missing, malformed or
                out of range.
        """
        config = cls(
            url=os.getenv("GEOJSON_URL", ""),
            query_params=_key_values(
                "GEOJSON_QUERY_PARAMS", _load_json("GEOJSON_QUERY_PARAMS")
            ),
            headers=_key_values("GEOJSON_HEADERS", _load_json("GEOJSON_HEADERS")),
            remove_id=_as_bool("GEOJSON_REMOVE_ID", os.getenv("GEOJSON_REMOVE_ID", "false")),
            timeout_ms=_as_number(
                "GEOJSON_TIMEOUT_MS", os.getenv("GEOJSON_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))
            ),
            retries=_as_int("GEOJSON_RETRIES", os.getenv("GEOJSON_RETRIES", str(DEFAULT_RETRIES))),
            sink=os.getenv("GEOJSON_SINK", DEFAULT_SINK),
            output_container=os.getenv("GEOJSON_OUTPUT_CONTAINER", DEFAULT_OUTPUT_CONTAINER),
            output_blob=os.getenv("GEOJSON_OUTPUT_BLOB", DEFAULT_OUTPUT_BLOB),
            output_path=os.getenv("GEOJSON_OUTPUT_PATH", ""),
        )
        _validate(config)
        return config

    @property
    def timeout_seconds(self) -> float:
        """Per-attempt deadline in seconds, as httpx expects it."""
        return self.timeout_ms / 1000.0

    @property
    def header_map(self) -> dict[str, str]:
        """Headers as a plain dict (later duplicates overwrite earlier ones)."""
        return {h.key: h.value for h in self.headers}


def config_json_schema() -> dict[str, object]:
    """Return the JSON Schema describing the task-environment options."""
    key_value_list = {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {"key": {"type": "string"}, "value": {"type": "string"}},
            "required": ["key", "value"],
        },
    }
    return {
        "type": "object",
        "properties": {
            "URL": {"type": "string"},
            "QueryParams": key_value_list,
            "Headers": key_value_list,
            "RemoveID": {
                "type": "boolean",
                "default": False,
                "description": (
                    "Remove the provided ID falling back to an Object Hash or Style Override"
                ),
            },
            "Timeout": {
                "type": "number",
                "default": DEFAULT_TIMEOUT_MS,
                "description": "Request timeout in milliseconds",
            },
            "Retries": {
                "type": "number",
                "default": DEFAULT_RETRIES,
                "description": "Number of retry attempts on failure",
            },
        },
        "required": ["URL"],
    }


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _load_json(key: str) -> object:
    raw = os.getenv(key, "")
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigValidationError(key, raw, f"must be a JSON list ({exc.msg})") from exc


def _key_values(key: str, raw: object) -> tuple[KeyValue, ...]:
    """Coerce a list of ``{key, value}`` objects; ``None`` means empty."""
    if raw is None:
        return ()
    if not isinstance(raw, list | tuple):
        raise ConfigValidationError(key, raw, "must be a list of {key, value} objects")
    entries: list[KeyValue] = []
    for idx, item in enumerate(raw):
        if isinstance(item, KeyValue):
            entries.append(item)
            continue
        if not isinstance(item, Mapping):
            raise ConfigValidationError(f"{key}[{idx}]", item, "must be a {key, value} object")
        k, v = item.get("key"), item.get("value")
        if not isinstance(k, str) or not isinstance(v, str):
            raise ConfigValidationError(f"{key}[{idx}]", item, "key and value must be strings")
        entries.append(KeyValue(key=k, value=v))
    return tuple(entries)


def _as_bool(key: str, raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no", ""}:
            return False
    raise ConfigValidationError(key, raw, "must be a boolean")


def _as_number(key: str, raw: object) -> float:
    if isinstance(raw, bool):
        raise ConfigValidationError(key, raw, "must be a number")
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigValidationError(key, raw, "must be a number") from exc


def _as_int(key: str, raw: object) -> int:
    number = _as_number(key, raw)
    if not number.is_integer():
        raise ConfigValidationError(key, raw, "must be a whole number")
    return int(number)


def _validate(config: EtlConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.url:
        raise ConfigValidationError("URL", config.url, "must not be empty")

    if urlparse(config.url).scheme not in {"http", "https"}:
        raise ConfigValidationError("URL", config.url, "must be an http(s) URL")

    if config.timeout_ms <= 0:
        raise ConfigValidationError("Timeout", config.timeout_ms, "must be > 0 (milliseconds)")

    if config.retries < 0:
        raise ConfigValidationError("Retries", config.retries, "must be >= 0")

    if config.sink not in SUPPORTED_SINKS:
        raise ConfigValidationError(
            "Sink", config.sink, f"must be one of {', '.join(sorted(SUPPORTED_SINKS))}"
        )

    if config.sink == "local" and not config.output_path:
        raise ConfigValidationError(
            "OutputPath", config.output_path, "must be set for the local sink"
        )
