from __future__ import annotations

"""Async HTTP client with retry and exponential backoff.

``ApiClient.get``/``ApiClient.put`` return parsed JSON, or ``{}`` when a
successful response has no usable body. Failures (transport errors and
non-2xx answers alike) are retried; after the last attempt a single
``ApiRequestFailed`` is raised.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional

import httpx

from licence_admin.core.config import Settings, get_settings
from licence_admin.core.errors import (
    ApiRequestFailed,
    ConfigurationError,
    HttpStatusError,
    error_message,
)
from licence_admin.core.logging import REQUEST_ID_HEADER, request_scope

logger = logging.getLogger("licence_admin.http")

DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_MS = 1000
DEFAULT_TIMEOUT_S = 10.0

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a successful call.

    kind:
    - ok: body parsed as JSON
    - empty: no body
    - unparsable: body present but not JSON
    """

    kind: Literal["ok", "empty", "unparsable"]
    value: Any = None

    @property
    def data(self) -> Any:
        return self.value if self.kind == "ok" else {}


def backoff_delay(attempt: int, backoff_ms: int = DEFAULT_BACKOFF_MS) -> float:
    """Seconds to wait after the zero-based ``attempt`` failed."""
    return (2**attempt) * backoff_ms / 1000


def encode_param(value: Any) -> str:
    # Mirror URLSearchParams string conversion for booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def clean_params(params: Optional[Mapping[str, Any]]) -> list[tuple[str, str]]:
    """Drop empty-string and None values, stringify the rest."""
    if not params:
        return []
    return [
        (key, encode_param(value))
        for key, value in params.items()
        if value is not None and value != ""
    ]


def extract_error_message(response: httpx.Response) -> str:
    fallback = f"HTTP error! status: {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return fallback


def parse_success_body(response: httpx.Response) -> FetchResult:
    if not response.content.strip():
        return FetchResult("empty")
    try:
        return FetchResult("ok", response.json())
    except ValueError:
        logger.warning(
            "non-JSON body on %s response from %s",
            response.status_code,
            response.request.url,
        )
        return FetchResult("unparsable")


async def fetch_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str | httpx.URL,
    *,
    retries: int = DEFAULT_RETRIES,
    backoff_ms: int = DEFAULT_BACKOFF_MS,
    sleep: Sleep = asyncio.sleep,
    **kwargs: Any,
) -> FetchResult:
    """Issue ``method url`` up to ``retries`` times.

    Waits ``2**attempt * backoff_ms`` between attempts. Extra keyword
    arguments go to ``client.request``.
    """
    if retries < 1:
        raise ValueError("retries must be at least 1")
    last_err: Optional[Exception] = None
    for attempt in range(retries):
        try:
            response = await client.request(method, url, **kwargs)
            if response.is_success:
                return parse_success_body(response)
            raise HttpStatusError(response.status_code, extract_error_message(response))
        except (httpx.TransportError, HttpStatusError) as e:
            last_err = e
            if attempt == retries - 1:
                break
            delay = backoff_delay(attempt, backoff_ms)
            logger.warning(
                "%s %s failed (attempt %d/%d): %s; retrying in %.1fs",
                method,
                url,
                attempt + 1,
                retries,
                error_message(e),
                delay,
                extra={
                    "method": method,
                    "url": url,
                    "attempt": attempt + 1,
                    "retries": retries,
                    "delay_s": delay,
                    "status_code": getattr(e, "status_code", None),
                },
            )
            await sleep(delay)
    assert last_err is not None
    logger.error(
        "%s %s gave up after %d attempts",
        method,
        url,
        retries,
        extra={"method": method, "url": url, "retries": retries},
    )
    raise ApiRequestFailed(retries, last_err) from last_err


class ApiClient:
    """Client for a JSON REST backend rooted at ``base_url``.

    Use as an async context manager, or call ``aclose()`` when done. Pass
    ``transport`` to route requests elsewhere (tests, in-process apps) and
    ``sleep`` to observe or skip backoff waits.
    """

    def __init__(
        self,
        base_url: str,
        *,
        retries: int = DEFAULT_RETRIES,
        backoff_ms: int = DEFAULT_BACKOFF_MS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ConfigurationError("API base URL is not configured")
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self.base_url = base_url.strip().rstrip("/")
        self.retries = retries
        self.backoff_ms = backoff_ms
        self._sleep = sleep
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, **overrides: Any
    ) -> "ApiClient":
        settings = settings or get_settings()
        kwargs: dict[str, Any] = {
            "retries": settings.http_retries,
            "backoff_ms": settings.http_backoff_ms,
            "timeout_s": settings.http_timeout_seconds,
        }
        kwargs.update(overrides)
        return cls(settings.api_base_url, **kwargs)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> httpx.URL:
        """``base_url + path`` with ``params`` appended to any query ``path`` carries."""
        url = httpx.URL(f"{self.base_url}{path}")
        extra = clean_params(params)
        if not extra:
            return url
        return url.copy_with(params=[*url.params.multi_items(), *extra])

    async def request(self, method: str, url: str | httpx.URL, **kwargs: Any) -> FetchResult:
        # One request id per logical call, shared by its retries and sent along
        with request_scope() as rid:
            headers = {REQUEST_ID_HEADER: rid, **(kwargs.pop("headers", None) or {})}
            return await fetch_with_retry(
                self._client,
                method,
                url,
                retries=self.retries,
                backoff_ms=self.backoff_ms,
                sleep=self._sleep,
                headers=headers,
                **kwargs,
            )

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        result = await self.request("GET", self.build_url(path, params))
        return result.data

    async def put(self, path: str, body: Any) -> Any:
        # NaN/Infinity are not JSON; fail before anything is sent
        content = json.dumps(body, allow_nan=False).encode("utf-8")
        result = await self.request(
            "PUT", self.build_url(path), headers=JSON_HEADERS, content=content
        )
        return result.data
