"""Persistent configuration and cache store for the server address."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping

from .cache import AddressCache, CachedAddress, Clock, now_ms
from .config import AppSettings, ResolverConfig
from .serialize import dump_to_path, loads

logger = logging.getLogger(__name__)


class AddressStore:
    """Holds the resolver configuration and the address cache.

    One instance is owned by :class:`~dynaddr.refresh.RefreshController` and
    shared by reference with the resolver. When ``path`` is ``None`` the store
    lives in memory only.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        path: str | Path | None = None,
        clock: Clock = now_ms,
        entry: CachedAddress | None = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self.path = Path(path) if path is not None else None
        self.clock = clock
        self.cache = AddressCache(lambda: self.config.ttl_ms, clock=clock, entry=entry)

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        settings: AppSettings | None = None,
        clock: Clock = now_ms,
    ) -> "AddressStore":
        """Build a store from environment defaults overlaid with the state file.

        A missing file yields defaults. An unreadable or corrupt one is logged
        and ignored.
        """
        settings = settings or AppSettings()
        state_path = Path(path if path is not None else settings.STATE_PATH)
        store = cls(ResolverConfig.from_settings(settings), path=state_path, clock=clock)

        if not state_path.exists():
            logger.debug("No saved address state at %s, using defaults", state_path)
            return store

        try:
            data = loads(state_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable address state %s: %s", state_path, exc)
            return store

        if not isinstance(data, Mapping):
            logger.warning("Ignoring malformed address state %s", state_path)
            return store

        store.apply(data)
        logger.debug("Loaded address state from %s", state_path)
        return store

    def apply(self, data: Mapping[str, Any]) -> None:
        config = data.get("config")
        if isinstance(config, Mapping):
            self.config.update(config)
        cache = data.get("cache")
        entry = CachedAddress.from_dict(cache) if isinstance(cache, Mapping) else None
        if entry is None:
            self.cache.clear()
        else:
            self.cache.set(entry.address, entry.fetched_at)

    def to_dict(self) -> Dict[str, Any]:
        entry = self.cache.get()
        return {
            "config": self.config.to_dict(),
            "cache": entry.to_dict() if entry is not None else None,
        }

    def save(self) -> None:
        if self.path is None:
            return
        dump_to_path(self.path, self.to_dict())
        logger.debug("Saved address state to %s", self.path)
