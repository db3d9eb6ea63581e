"""Shared HTTP client utilities for dynaddr."""

from __future__ import annotations

from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import AsyncIterator, Dict

import httpx

from .constants import FETCH_TIMEOUT_MS, VERSION_HEADER

try:  # pragma: no cover - optional dependency used only when available
    import h2  # noqa: F401
except ModuleNotFoundError:  # pragma: no cover
    HTTP2_AVAILABLE = False
else:  # pragma: no cover
    HTTP2_AVAILABLE = True

DEFAULT_TIMEOUT = httpx.Timeout(FETCH_TIMEOUT_MS / 1000)
POOL_LIMITS = httpx.Limits(max_keepalive_connections=10, max_connections=20)


def client_version() -> str:
    """Version string of the installed build, sent with every request."""
    try:
        return version("dynaddr")
    except PackageNotFoundError:
        from . import __version__

        return __version__


def default_headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        VERSION_HEADER: client_version(),
    }


@asynccontextmanager
async def get_client(
    timeout: httpx.Timeout | float | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a configured AsyncClient.

    The client follows redirects and identifies the build through the version
    header. It is closed when the block exits, including on cancellation.
    """
    async with httpx.AsyncClient(
        http2=HTTP2_AVAILABLE,
        timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
        limits=POOL_LIMITS,
        headers=default_headers(),
        follow_redirects=True,
    ) as client:
        yield client
