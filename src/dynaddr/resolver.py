"""Effective server address resolution."""

from __future__ import annotations

import logging

from .refresh import RefreshController
from .store import AddressStore

logger = logging.getLogger(__name__)


class AddressResolver:
    """Picks the server address to use right now.

    Priority, first match wins:

    1. the compiled-in testing address while the testing override is on
    2. the static default when dynamic addresses are disabled
    3. the cached dynamic address, fresh or stale; a stale hit also submits a
       background refresh that this call never waits for
    4. the static default

    ``resolve`` is synchronous and never touches the network.
    """

    def __init__(self, controller: RefreshController) -> None:
        self.controller = controller

    @property
    def store(self) -> AddressStore:
        return self.controller.store

    def resolve(self) -> str:
        config = self.store.config

        if config.testing_override_active:
            return config.testing_address

        if not config.use_dynamic_address:
            return config.static_default_address

        cache = self.store.cache
        entry = cache.get()
        if entry is not None:
            if not cache.is_expired():
                return entry.address

            logger.info("Using expired dynamic server address, will update in background")
            self.controller.submit_scheduled_refresh()
            return entry.address

        return config.static_default_address
