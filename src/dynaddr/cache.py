"""Single-value TTL cache for the dynamically looked-up server address."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class CachedAddress:
    """An address together with the time it was fetched.

    Frozen so that a reader always sees both fields from the same write.
    """

    address: str
    fetched_at: int

    def age_ms(self, now: int) -> int:
        return now - self.fetched_at

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "fetched_at": self.fetched_at}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CachedAddress | None:
        address = data.get("address")
        fetched_at = data.get("fetched_at")
        if not isinstance(address, str) or not address:
            return None
        if isinstance(fetched_at, bool) or not isinstance(fetched_at, int):
            return None
        return cls(address=address, fetched_at=fetched_at)


class AddressCache:
    def __init__(
        self,
        ttl_ms: int | Callable[[], int],
        clock: Clock = now_ms,
        entry: CachedAddress | None = None,
    ) -> None:
        # ``ttl_ms`` may be a callable so the window follows live config edits
        self._ttl = ttl_ms if callable(ttl_ms) else (lambda: ttl_ms)
        self._clock = clock
        self._entry = entry

    @property
    def ttl_ms(self) -> int:
        return self._ttl()

    def get(self) -> CachedAddress | None:
        return self._entry

    def set(self, address: str, now: int | None = None) -> CachedAddress:
        entry = CachedAddress(address=address, fetched_at=self._clock() if now is None else now)
        self._entry = entry
        return entry

    def clear(self) -> None:
        self._entry = None

    def is_expired(self, now: int | None = None) -> bool:
        entry = self._entry
        if entry is None:
            return True
        if now is None:
            now = self._clock()
        return entry.age_ms(now) > self.ttl_ms
