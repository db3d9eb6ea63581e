"""Outbound API requests against the resolved server address."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

import httpx

from .constants import SKIP_CACHE_HEADER
from .http_client import get_client
from .resolver import AddressResolver

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    status: int
    ok: bool
    response_text: str


def encode_query(data: Mapping[str, Any] | None) -> List[Tuple[str, str]]:
    """Turn request data into query parameters.

    Strings are sent as they are; every other value, lists and ``None``
    included, is sent as its JSON text.
    """
    return [
        (key, value if isinstance(value, str) else json.dumps(value))
        for key, value in (data or {}).items()
    ]


def build_api_url(resolver: AddressResolver, endpoint: str) -> str:
    return f"{resolver.resolve()}{endpoint}"


async def send_request(
    method: str,
    url: str,
    data: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> ApiResponse:
    """Send ``method`` to ``url``; GET data goes in the query string, anything else as JSON."""
    request_headers: Dict[str, str] = dict(headers or {})
    kwargs: Dict[str, Any] = {"headers": request_headers}
    if method.lower() == "get":
        kwargs["params"] = encode_query(data)
    elif data is not None:
        kwargs["content"] = json.dumps(data)

    if client is None:
        async with get_client() as own_client:
            response = await own_client.request(method.upper(), url, **kwargs)
    else:
        response = await client.request(method.upper(), url, **kwargs)

    if not response.is_success:
        logger.debug(f"{method.upper()} {url} returned HTTP {response.status_code}")
    return ApiResponse(
        status=response.status_code,
        ok=response.is_success,
        response_text=response.text,
    )


async def call_api(
    resolver: AddressResolver,
    method: str,
    endpoint: str,
    data: Mapping[str, Any] | None = None,
    skip_server_cache: bool = False,
    headers: Mapping[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> ApiResponse:
    request_headers = dict(headers or {})
    if skip_server_cache:
        request_headers[SKIP_CACHE_HEADER] = "1"
        request_headers["cache-control"] = "no-cache"

    url = build_api_url(resolver, endpoint)
    return await send_request(method, url, data, request_headers, client=client)
