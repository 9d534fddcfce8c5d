"""Tests for run configuration.

Covers:
- Defaults for the task-environment options
- ``from_dict`` with the task-environment shape
- ``from_env`` with ``GEOJSON_*`` variables
- Fail-fast validation
- JSON Schema output
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from geojson_etl.core.config import (
    ConfigValidationError,
    EtlConfig,
    KeyValue,
    config_json_schema,
)


class TestEtlConfigDefaults:
    """Verify default configuration values."""

    def test_defaults(self) -> None:
        cfg = EtlConfig.from_dict({"URL": "https://example.com/data.geojson"})
        assert cfg.query_params == ()
        assert cfg.headers == ()
        assert cfg.remove_id is False
        assert cfg.timeout_ms == 30000
        assert cfg.retries == 2
        assert cfg.sink == "blob"
        assert cfg.output_container == "geojson-output"
        assert cfg.output_blob == "features.geojson"

    def test_timeout_seconds(self) -> None:
        cfg = EtlConfig(url="https://example.com", timeout_ms=1500)
        assert cfg.timeout_seconds == 1.5

    def test_is_frozen(self) -> None:
        cfg = EtlConfig(url="https://example.com")
        with pytest.raises(AttributeError):
            cfg.url = "https://other.example.com"  # type: ignore[misc]


class TestEtlConfigFromDict:
    """Task-environment mapping."""

    def test_full_environment(self) -> None:
        cfg = EtlConfig.from_dict(
            {
                "URL": "https://example.com/data.geojson",
                "QueryParams": [{"key": "f", "value": "geojson"}, {"key": "where", "value": "1=1"}],
                "Headers": [{"key": "Authorization", "value": "Bearer abc"}],
                "RemoveID": True,
                "Timeout": 5000,
                "Retries": 4,
            }
        )
        assert cfg.query_params == (
            KeyValue("f", "geojson"),
            KeyValue("where", "1=1"),
        )
        assert cfg.header_map == {"Authorization": "Bearer abc"}
        assert cfg.remove_id is True
        assert cfg.timeout_ms == 5000
        assert cfg.retries == 4

    def test_later_duplicate_header_wins(self) -> None:
        cfg = EtlConfig.from_dict(
            {
                "URL": "https://example.com",
                "Headers": [{"key": "X-Token", "value": "a"}, {"key": "X-Token", "value": "b"}],
            }
        )
        assert cfg.header_map == {"X-Token": "b"}

    def test_missing_url_raises(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            EtlConfig.from_dict({})
        assert exc_info.value.key == "URL"

    def test_non_http_url_raises(self) -> None:
        with pytest.raises(ConfigValidationError, match="http"):
            EtlConfig.from_dict({"URL": "ftp://example.com/data"})

    def test_zero_timeout_raises(self) -> None:
        with pytest.raises(ConfigValidationError, match="Timeout"):
            EtlConfig.from_dict({"URL": "https://example.com", "Timeout": 0})

    def test_negative_retries_raises(self) -> None:
        with pytest.raises(ConfigValidationError, match="Retries"):
            EtlConfig.from_dict({"URL": "https://example.com", "Retries": -1})

    def test_fractional_retries_raises(self) -> None:
        with pytest.raises(ConfigValidationError, match="whole number"):
            EtlConfig.from_dict({"URL": "https://example.com", "Retries": 1.5})

    def test_malformed_query_param_raises(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            EtlConfig.from_dict({"URL": "https://example.com", "QueryParams": [{"key": "f"}]})
        assert exc_info.value.key == "QueryParams[0]"

    def test_query_params_must_be_list(self) -> None:
        with pytest.raises(ConfigValidationError):
            EtlConfig.from_dict({"URL": "https://example.com", "QueryParams": "f=geojson"})

    def test_local_sink_requires_path(self) -> None:
        with pytest.raises(ConfigValidationError, match="OutputPath"):
            EtlConfig.from_dict({"URL": "https://example.com", "Sink": "local"})

    def test_unknown_sink_raises(self) -> None:
        with pytest.raises(ConfigValidationError, match="Sink"):
            EtlConfig.from_dict({"URL": "https://example.com", "Sink": "s3"})


class TestEtlConfigFromEnv:
    """``GEOJSON_*`` environment variables."""

    def test_loads_from_environment(self) -> None:
        env = {
            "GEOJSON_URL": "https://example.com/data.geojson",
            "GEOJSON_QUERY_PARAMS": '[{"key": "f", "value": "geojson"}]',
            "GEOJSON_HEADERS": '[{"key": "X-Api-Key", "value": "secret"}]',
            "GEOJSON_REMOVE_ID": "true",
            "GEOJSON_TIMEOUT_MS": "10000",
            "GEOJSON_RETRIES": "0",
            "GEOJSON_SINK": "local",
            "GEOJSON_OUTPUT_PATH": "/tmp/out.geojson",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = EtlConfig.from_env()
        assert cfg.url == "https://example.com/data.geojson"
        assert cfg.query_params == (KeyValue("f", "geojson"),)
        assert cfg.header_map == {"X-Api-Key": "secret"}
        assert cfg.remove_id is True
        assert cfg.timeout_ms == 10000.0
        assert cfg.retries == 0
        assert cfg.sink == "local"
        assert cfg.output_path == "/tmp/out.geojson"

    def test_defaults_when_only_url_set(self) -> None:
        with patch.dict(os.environ, {"GEOJSON_URL": "https://example.com"}, clear=True):
            cfg = EtlConfig.from_env()
        assert cfg.timeout_ms == 30000
        assert cfg.retries == 2
        assert cfg.remove_id is False

    def test_invalid_json_headers_raises(self) -> None:
        env = {"GEOJSON_URL": "https://example.com", "GEOJSON_HEADERS": "not-json"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(ConfigValidationError):
            EtlConfig.from_env()

    def test_invalid_bool_raises(self) -> None:
        env = {"GEOJSON_URL": "https://example.com", "GEOJSON_REMOVE_ID": "maybe"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(ConfigValidationError):
            EtlConfig.from_env()

    def test_non_numeric_timeout_raises(self) -> None:
        env = {"GEOJSON_URL": "https://example.com", "GEOJSON_TIMEOUT_MS": "abc"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(ConfigValidationError):
            EtlConfig.from_env()


class TestConfigJsonSchema:
    def test_lists_every_option(self) -> None:
        schema = config_json_schema()
        assert set(schema["properties"]) == {  # type: ignore[call-overload]
            "URL",
            "QueryParams",
            "Headers",
            "RemoveID",
            "Timeout",
            "Retries",
        }
        assert schema["required"] == ["URL"]

    def test_defaults_match_config(self) -> None:
        props = config_json_schema()["properties"]
        assert props["RemoveID"]["default"] is False  # type: ignore[index]
        assert props["Timeout"]["default"] == 30000  # type: ignore[index]
        assert props["Retries"]["default"] == 2  # type: ignore[index]


class TestConfigValidationError:
    def test_is_pipeline_error(self) -> None:
        err = ConfigValidationError("Timeout", -1, "must be > 0")
        assert err.stage == "config"
        assert err.code == "CONFIG_VALIDATION_FAILED"
        assert "Timeout=-1" in str(err)
