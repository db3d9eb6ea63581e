"""
Remote lookup of the dynamic server address.

A single GET against the configured lookup URL, bounded by a fixed timeout.
Failures are reported as values on :class:`FetchResult` rather than raised,
and nothing here retries.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from .constants import FETCH_TIMEOUT_MS
from .http_client import get_client
from .serialize import loads

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], AbstractAsyncContextManager[httpx.AsyncClient]]


class FetchError(Exception):
    """Base class for lookup failures"""

    kind = "error"


class BadStatusError(FetchError):
    """The lookup endpoint answered with a non-2xx status"""

    kind = "bad_status"

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


class InvalidPayloadError(FetchError):
    """The response body did not carry a usable ``address`` string"""

    kind = "invalid_payload"

    def __init__(self, detail: str = "invalid server address payload"):
        super().__init__(detail)


class FetchTimeoutError(FetchError):
    """The lookup did not complete within the timeout"""

    kind = "timeout"

    def __init__(self, timeout_ms: int = FETCH_TIMEOUT_MS):
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms} ms")


class TransportError(FetchError):
    """Any other network or client failure"""

    kind = "transport"

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


@dataclass
class FetchResult:
    """Outcome of one lookup attempt"""

    address: str | None = None
    error: FetchError | None = None
    status_code: int | None = None
    response_time: float | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.address is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "success": self.success,
            "error": str(self.error) if self.error else None,
            "error_kind": self.error.kind if self.error else None,
            "status_code": self.status_code,
            "response_time": self.response_time,
        }


def parse_address_payload(body: str | bytes) -> str:
    """Extract the ``address`` field from a lookup response body.

    Raises:
        InvalidPayloadError: the body is not a JSON object with a non-empty
            string ``address``.
    """
    try:
        data = loads(body)
    except ValueError as exc:
        raise InvalidPayloadError(f"response is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidPayloadError("response is not a JSON object")

    address = data.get("address")
    if not isinstance(address, str) or not address:
        raise InvalidPayloadError(f"missing or invalid address field: {address!r}")
    return address


class AddressFetcher:
    """Looks up the current server address from ``lookup_url``.

    ``lookup_url`` may be a string or a zero-argument callable, which lets the
    fetcher follow configuration edits without holding any state itself.
    """

    def __init__(
        self,
        lookup_url: str | Callable[[], str],
        client_factory: ClientFactory = get_client,
        timeout_ms: int = FETCH_TIMEOUT_MS,
    ) -> None:
        self._lookup_url = lookup_url
        self._client_factory = client_factory
        self.timeout_ms = timeout_ms

    @property
    def lookup_url(self) -> str:
        if callable(self._lookup_url):
            return self._lookup_url()
        return self._lookup_url

    async def fetch(self) -> FetchResult:
        url = self.lookup_url
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        def _elapsed() -> float:
            return loop.time() - start_time

        try:
            async with self._client_factory() as client:
                # wait_for cancels the request task; the client block then closes the connection
                response = await asyncio.wait_for(
                    client.get(url), timeout=self.timeout_ms / 1000
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(f"Fetching server address from {url} timed out")
            return FetchResult(error=FetchTimeoutError(self.timeout_ms), response_time=_elapsed())
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.error(f"Error fetching server address from {url}: {exc}")
            return FetchResult(error=TransportError(exc), response_time=_elapsed())

        response_time = _elapsed()
        status = response.status_code

        if not response.is_success:
            logger.warning(f"Failed to fetch server address: HTTP {status}")
            return FetchResult(
                error=BadStatusError(status), status_code=status, response_time=response_time
            )

        try:
            address = parse_address_payload(response.content)
        except InvalidPayloadError as exc:
            logger.warning(f"Invalid server address payload from {url}: {exc}")
            return FetchResult(error=exc, status_code=status, response_time=response_time)

        logger.info(f"Fetched server address {address} in {response_time:.3f}s")
        return FetchResult(address=address, status_code=status, response_time=response_time)
