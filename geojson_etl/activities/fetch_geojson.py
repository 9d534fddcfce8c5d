"""Fetch activity — GET the source FeatureCollection with bounded retry.

Each attempt gets its own deadline of ``timeout_ms``.  A transport
failure, a timeout or a non-2xx status fails the attempt; after a failed
attempt that is not the last one the fetcher sleeps
``1000 ms × (attempt + 1)`` and tries again.  Attempts are strictly
sequential.  When the final attempt fails its error propagates and the
run aborts.

Parsing the body is a separate step (``parse_json_body``) because a
malformed body is not retried.
"""

from __future__ import annotations

import json
import logging
import time
from concurrent import futures
from typing import TYPE_CHECKING

import httpx

from geojson_etl.core.constants import DEFAULT_BACKOFF_STEP_MS
from geojson_etl.core.exceptions import ContractError, TransientError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger("geojson_etl.activities.fetch_geojson")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FetchError(TransientError):
    """A single fetch attempt failed.

    Attributes:
        attempt: Zero-based index of the attempt that raised the error.
    """

    default_stage = "fetch"
    default_code = "FETCH_FAILED"

    def __init__(self, message: str, *, attempt: int = 0) -> None:
        self.attempt = attempt
        super().__init__(message)


class NetworkError(FetchError):
    """Connection, DNS or protocol failure."""

    default_code = "NETWORK_ERROR"


class FetchTimeoutError(FetchError):
    """The attempt did not complete within its deadline."""

    default_code = "FETCH_TIMEOUT"

    def __init__(self, timeout_ms: float, *, attempt: int = 0) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Request timed out after {timeout_ms:g} ms", attempt=attempt)


class HTTPStatusError(FetchError):
    """The endpoint answered with a non-2xx status.

    Attributes:
        status_code: HTTP status code.
        reason: Reason phrase sent with the status.
    """

    default_code = "HTTP_STATUS"

    def __init__(self, status_code: int, reason: str, *, attempt: int = 0) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"HTTP {status_code}: {reason}", attempt=attempt)


class JSONParseError(ContractError):
    """The response body is not valid JSON."""

    default_stage = "fetch"
    default_code = "INVALID_JSON"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def fetch_with_retry(
    url: str,
    headers: Mapping[str, str],
    timeout_ms: float,
    retries: int,
    *,
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
    log: logging.Logger | None = None,
) -> bytes:
    """GET *url* and return the raw response body.

    Args:
        url: Fully built request URL (query string included).
        headers: Request headers.
        timeout_ms: Deadline for each attempt, in milliseconds.
        retries: Additional attempts after the first; ``retries + 1`` in total.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        sleep: Called with the backoff delay in seconds between attempts.
        log: Logger receiving retry and exhaustion messages.

    Returns:
        The response body bytes of the first successful attempt.

    Raises:
        ValueError: If *retries* is negative.
        FetchError: The error of the final attempt once all attempts failed.
    """
    if retries < 0:
        msg = f"retries must be >= 0, got {retries}"
        raise ValueError(msg)

    log = log or logger
    attempts = retries + 1

    def attempt_once(attempt: int) -> bytes:
        try:
            body = _fetch_once(url, headers, timeout_ms, transport=transport)
        except FetchError as exc:
            exc.attempt = attempt
            raise
        log.info(
            "Fetch succeeded | url=%s | attempt=%d | size=%d bytes",
            url,
            attempt + 1,
            len(body),
        )
        return body

    for attempt in range(retries):
        try:
            return attempt_once(attempt)
        except FetchError as exc:
            delay_ms = DEFAULT_BACKOFF_STEP_MS * (attempt + 1)
            log.warning(
                "Fetch attempt %d/%d failed, retrying | url=%s | delay_ms=%d | error=%s",
                attempt + 1,
                attempts,
                url,
                delay_ms,
                exc,
            )
            sleep(delay_ms / 1000.0)

    try:
        return attempt_once(retries)
    except FetchError as exc:
        log.error(
            "Fetch retries exhausted | url=%s | attempts=%d | error=%s",
            url,
            attempts,
            exc,
        )
        raise


def parse_json_body(body: bytes | str) -> object:
    """Decode the response body as JSON.

    Raises:
        JSONParseError: If the body is not valid JSON.
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"Invalid JSON response: {exc}"
        raise JSONParseError(msg) from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _fetch_once(
    url: str,
    headers: Mapping[str, str],
    timeout_ms: float,
    *,
    transport: httpx.BaseTransport | None = None,
) -> bytes:
    """Run a single attempt and abandon it once ``timeout_ms`` has passed.

    The request runs on a worker thread raced against the deadline.  When
    the deadline wins, the client is closed so the in-flight connection is
    torn down, and the attempt fails with ``FetchTimeoutError`` whatever
    the worker would eventually have returned.
    """
    timeout_s = timeout_ms / 1000.0
    deadline = time.monotonic() + timeout_s
    client = httpx.Client(timeout=timeout_s, follow_redirects=True, transport=transport)
    executor = futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="geojson-fetch")
    try:
        future = executor.submit(_read_response, client, url, headers, timeout_ms, deadline)
        return future.result(timeout=timeout_s)
    except futures.TimeoutError as exc:
        raise FetchTimeoutError(timeout_ms) from exc
    finally:
        client.close()
        executor.shutdown(wait=False, cancel_futures=True)


def _read_response(
    client: httpx.Client,
    url: str,
    headers: Mapping[str, str],
    timeout_ms: float,
    deadline: float,
) -> bytes:
    """Send the GET and read the full body, checking *deadline* as data arrives."""
    try:
        with client.stream("GET", url, headers=dict(headers)) as response:
            if time.monotonic() > deadline:
                raise FetchTimeoutError(timeout_ms)
            if not response.is_success:
                raise HTTPStatusError(response.status_code, response.reason_phrase)
            chunks: list[bytes] = []
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise FetchTimeoutError(timeout_ms)
    except httpx.TimeoutException as exc:
        raise FetchTimeoutError(timeout_ms) from exc
    except httpx.HTTPError as exc:
        msg = f"Request failed: {exc}"
        raise NetworkError(msg) from exc

    return b"".join(chunks)
