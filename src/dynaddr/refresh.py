"""Refresh orchestration for the dynamic server address."""

from __future__ import annotations

import asyncio
import logging
from typing import Set

from .fetcher import AddressFetcher, FetchResult
from .store import AddressStore

logger = logging.getLogger(__name__)


class RefreshController:
    """Owns the address store and every write to its cache.

    ``scheduled_refresh`` is the best-effort background path used while stale
    data is being served; ``force_refresh`` is the interactive path whose
    outcome is reported back to the caller. Both share ``_refresh``, which
    writes the cache and the static default only when a lookup succeeds.

    Background refreshes are tracked as tasks so callers can ``drain`` them
    (tests, shutdown) or cancel them with ``aclose``.
    """

    def __init__(self, store: AddressStore, fetcher: AddressFetcher | None = None) -> None:
        self.store = store
        self.fetcher = fetcher or AddressFetcher(lambda: store.config.lookup_url)
        self._tasks: Set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> Set[asyncio.Task[None]]:
        return {task for task in self._tasks if not task.done()}

    async def _refresh(self) -> FetchResult:
        result = await self.fetcher.fetch()
        address = result.address
        if not result.success or address is None:
            return result

        store = self.store
        store.cache.set(address, store.clock())
        store.config.static_default_address = address
        try:
            store.save()
        except OSError as exc:
            logger.warning(f"Server address updated but could not be saved: {exc}")
        return result

    async def scheduled_refresh(self) -> None:
        config = self.store.config
        if not config.use_dynamic_address:
            return
        if not self.store.cache.is_expired():
            logger.debug("Dynamic server address cache is still valid")
            return

        logger.info("Updating dynamic server address cache...")
        result = await self._refresh()
        if result.success:
            logger.info("Dynamic server address cache updated successfully")
        else:
            logger.warning(
                f"Failed to update dynamic server address ({result.error}), will use fallback"
            )

    async def force_refresh(self) -> bool:
        if not self.store.config.use_dynamic_address:
            logger.warning("Dynamic server address is disabled")
            return False

        logger.info("Force refreshing server address...")
        result = await self._refresh()
        if result.success:
            logger.info(f"Server address refreshed successfully: {result.address}")
            return True

        logger.warning(f"Failed to refresh server address: {result.error}")
        return False

    def clear_cache(self) -> None:
        self.store.cache.clear()
        self.store.save()
        logger.info("Server address cache cleared")

    def submit_scheduled_refresh(self) -> asyncio.Task[None] | None:
        """Start ``scheduled_refresh`` as a detached task on the running loop.

        Returns ``None`` when called outside an event loop; the next resolve
        that finds an expired cache inside a loop will try again.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, skipping background refresh")
            return None

        task = loop.create_task(self.scheduled_refresh(), name="dynaddr-scheduled-refresh")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background server address refresh crashed", exc_info=exc)

    async def drain(self) -> None:
        """Wait for every background refresh submitted so far."""
        while self.pending:
            await asyncio.gather(*self.pending, return_exceptions=True)

    async def aclose(self) -> None:
        for task in self.pending:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
