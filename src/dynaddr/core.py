"""Wiring of the store, refresh controller, resolver and message router."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .cache import Clock, now_ms
from .config import AppSettings
from .fetcher import AddressFetcher
from .messaging import MessageRouter
from .refresh import RefreshController
from .resolver import AddressResolver
from .store import AddressStore


@dataclass
class AddressService:
    store: AddressStore
    controller: RefreshController
    resolver: AddressResolver
    router: MessageRouter

    def resolve(self) -> str:
        return self.resolver.resolve()

    async def aclose(self) -> None:
        await self.controller.aclose()


def build_service(
    store: AddressStore,
    fetcher: AddressFetcher | None = None,
) -> AddressService:
    controller = RefreshController(store, fetcher)
    resolver = AddressResolver(controller)
    return AddressService(
        store=store,
        controller=controller,
        resolver=resolver,
        router=MessageRouter(controller, resolver),
    )


def create_service(
    state_path: str | Path | None = None,
    settings: AppSettings | None = None,
    fetcher: AddressFetcher | None = None,
    clock: Clock = now_ms,
) -> AddressService:
    """Load persisted state and return a ready-to-use service."""
    store = AddressStore.load(state_path, settings=settings, clock=clock)
    return build_service(store, fetcher)
