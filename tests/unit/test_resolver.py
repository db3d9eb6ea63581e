import asyncio

import pytest

T0 = 1_700_000_000_000
STATIC_ADDRESS = "https://static.example"
TESTING_ADDRESS = "http://testing.local"


def test_testing_override_wins_over_everything(resolver, store):
    store.config.testing_override_active = True
    store.cache.set("https://cached.example", T0)
    assert resolver.resolve() == TESTING_ADDRESS

    store.config.use_dynamic_address = False
    assert resolver.resolve() == TESTING_ADDRESS


def test_static_default_when_dynamic_disabled(resolver, store, fake_fetcher):
    store.config.use_dynamic_address = False
    store.cache.set("https://cached.example", T0)
    assert resolver.resolve() == STATIC_ADDRESS
    assert fake_fetcher.calls == 0


def test_static_default_when_cache_empty(resolver, controller, fake_fetcher):
    assert resolver.resolve() == STATIC_ADDRESS
    assert fake_fetcher.calls == 0
    assert not controller.pending


def test_fresh_cache_is_served_without_refresh(resolver, store, clock, fake_fetcher):
    store.cache.set("https://cached.example", clock())
    clock.advance(500)
    assert resolver.resolve() == "https://cached.example"
    assert fake_fetcher.calls == 0


def test_stale_cache_outside_event_loop_is_served(resolver, store, clock, fake_fetcher):
    store.cache.set("https://old.example", clock())
    clock.advance(2000)
    assert resolver.resolve() == "https://old.example"
    assert fake_fetcher.calls == 0


@pytest.mark.asyncio
async def test_stale_cache_is_served_and_refreshed_in_background(
    resolver, controller, store, clock, fake_fetcher
):
    store.cache.set("https://old.example", clock())
    clock.advance(2000)
    fake_fetcher.succeed_with("https://new.example")

    assert resolver.resolve() == "https://old.example"
    assert len(controller.pending) == 1

    await controller.drain()

    assert fake_fetcher.calls == 1
    assert store.cache.get().address == "https://new.example"
    assert store.cache.get().fetched_at == clock()
    assert resolver.resolve() == "https://new.example"


@pytest.mark.asyncio
async def test_resolve_does_not_wait_for_hanging_fetch(
    resolver, controller, store, clock, fake_fetcher
):
    store.cache.set("https://old.example", clock())
    clock.advance(2000)
    fake_fetcher.gate = asyncio.Event()
    fake_fetcher.succeed_with("https://new.example")

    assert resolver.resolve() == "https://old.example"
    await asyncio.sleep(0)
    assert fake_fetcher.calls == 1

    # readers keep seeing the last committed value while the fetch hangs
    assert resolver.resolve() == "https://old.example"
    assert store.cache.get().address == "https://old.example"

    fake_fetcher.gate.set()
    await controller.drain()
    assert resolver.resolve() == "https://new.example"


@pytest.mark.asyncio
async def test_failed_background_refresh_keeps_stale_address(
    resolver, controller, store, clock, fake_fetcher
):
    store.cache.set("https://old.example", clock())
    clock.advance(2000)
    fake_fetcher.fail_with_status(500)

    assert resolver.resolve() == "https://old.example"
    await controller.drain()

    assert fake_fetcher.calls == 1
    assert store.cache.get().address == "https://old.example"
    assert store.config.static_default_address == STATIC_ADDRESS
