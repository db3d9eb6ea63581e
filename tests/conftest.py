import asyncio
import inspect
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from dynaddr.config import ResolverConfig  # noqa: E402
from dynaddr.fetcher import BadStatusError, FetchResult  # noqa: E402
from dynaddr.refresh import RefreshController  # noqa: E402
from dynaddr.resolver import AddressResolver  # noqa: E402
from dynaddr.store import AddressStore  # noqa: E402

T0 = 1_700_000_000_000
STATIC_ADDRESS = "https://static.example"
TESTING_ADDRESS = "http://testing.local"
LOOKUP_URL = "http://lookup.test/address"


def pytest_configure(config):
    """Register compatibility markers."""

    config.addinivalue_line("markers", "asyncio: mark a test as requiring the event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Execute ``async`` tests on a fresh event loop when no plugin has taken them."""

    testfunction = pyfuncitem.obj
    if not inspect.iscoroutinefunction(testfunction):
        return None

    signature = inspect.signature(testfunction)
    call_args = {
        name: value for name, value in pyfuncitem.funcargs.items() if name in signature.parameters
    }

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(testfunction(**call_args))
        loop.run_until_complete(loop.shutdown_asyncgens())
    finally:
        asyncio.set_event_loop(None)
        loop.close()

    return True


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeFetcher:
    """Stands in for AddressFetcher; replays queued results and counts calls.

    When ``gate`` is set, each fetch blocks until the event is released.
    """

    def __init__(self, *results: FetchResult):
        self.results = list(results)
        self.calls = 0
        self.gate: asyncio.Event | None = None

    def succeed_with(self, address: str) -> None:
        self.results.append(FetchResult(address=address, status_code=200))

    def fail_with_status(self, status: int) -> None:
        self.results.append(FetchResult(error=BadStatusError(status), status_code=status))

    async def fetch(self) -> FetchResult:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if not self.results:
            return FetchResult(error=BadStatusError(503), status_code=503)
        return self.results.pop(0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver_config():
    return ResolverConfig(
        use_dynamic_address=True,
        testing_override_active=False,
        testing_address=TESTING_ADDRESS,
        static_default_address=STATIC_ADDRESS,
        ttl_ms=1000,
        lookup_url=LOOKUP_URL,
    )


@pytest.fixture
def store(resolver_config, clock):
    return AddressStore(resolver_config, clock=clock)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def controller(store, fake_fetcher):
    return RefreshController(store, fake_fetcher)  # type: ignore[arg-type]


@pytest.fixture
def resolver(controller):
    return AddressResolver(controller)
