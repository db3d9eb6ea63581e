"""Command channel between the interactive surface and the refresh controller."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping

from .constants import MSG_CLEAR_CACHE, MSG_FORCE_REFRESH, MSG_GET_ADDRESS
from .refresh import RefreshController
from .resolver import AddressResolver

logger = logging.getLogger(__name__)

Reply = Dict[str, Any]
Handler = Callable[[Mapping[str, Any]], Awaitable[Reply]]


class MessageRouter:
    """Dispatches ``{"message": name, ...}`` commands and returns a reply dict.

    Every reply carries an ``ok`` flag. A handler that raises is reported as
    ``{"ok": False}`` so the sender always gets an answer.
    """

    def __init__(self, controller: RefreshController, resolver: AddressResolver) -> None:
        self.controller = controller
        self.resolver = resolver
        self._handlers: Dict[str, Handler] = {
            MSG_FORCE_REFRESH: self._force_refresh,
            MSG_CLEAR_CACHE: self._clear_cache,
            MSG_GET_ADDRESS: self._get_address,
        }

    async def handle(self, message: Mapping[str, Any]) -> Reply:
        name = message.get("message") if isinstance(message, Mapping) else None
        handler = self._handlers.get(name) if isinstance(name, str) else None
        if handler is None:
            logger.debug(f"Ignoring unknown message: {name!r}")
            return {"ok": False, "error": "unknown message"}

        try:
            return await handler(message)
        except Exception as exc:
            logger.error(f"Handler for {name} failed: {exc}", exc_info=True)
            return {"ok": False}

    async def _force_refresh(self, message: Mapping[str, Any]) -> Reply:
        return {"ok": await self.controller.force_refresh()}

    async def _clear_cache(self, message: Mapping[str, Any]) -> Reply:
        self.controller.clear_cache()
        return {"ok": True}

    async def _get_address(self, message: Mapping[str, Any]) -> Reply:
        return {"ok": True, "address": self.resolver.resolve()}
