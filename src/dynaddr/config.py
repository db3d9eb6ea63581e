import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from .constants import (
    DEFAULT_LOOKUP_URL,
    DEFAULT_SERVER_ADDRESS,
    DEFAULT_STATE_PATH,
    DEFAULT_TTL_MS,
    TESTING_SERVER_ADDRESS,
)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppSettings:
    """Centralized environment defaults for server address resolution"""

    # Resolution policy
    USE_DYNAMIC_SERVER_ADDRESS: bool = _env_flag("USE_DYNAMIC_SERVER_ADDRESS", "True")
    TESTING_SERVER: bool = _env_flag("TESTING_SERVER", "False")
    SERVER_ADDRESS: str = os.getenv("SERVER_ADDRESS", DEFAULT_SERVER_ADDRESS)

    # Remote lookup
    DYNAMIC_SERVER_ADDRESS_URL: str = os.getenv("DYNAMIC_SERVER_ADDRESS_URL", DEFAULT_LOOKUP_URL)
    DYNAMIC_SERVER_ADDRESS_TTL_MS: int = int(
        os.getenv("DYNAMIC_SERVER_ADDRESS_TTL_MS", str(DEFAULT_TTL_MS))
    )

    # Persistence
    STATE_PATH: str = os.getenv("STATE_PATH", DEFAULT_STATE_PATH)

    # Logging
    MASK_SENSITIVE_DATA = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


@dataclass
class ResolverConfig:
    """Runtime configuration shared by the resolver and the refresh controller.

    ``testing_address`` is compiled in and never persisted. Every other field
    round-trips through the state file, and ``static_default_address`` is
    rewritten on each successful refresh.
    """

    use_dynamic_address: bool = True
    testing_override_active: bool = False
    testing_address: str = TESTING_SERVER_ADDRESS
    static_default_address: str = DEFAULT_SERVER_ADDRESS
    ttl_ms: int = DEFAULT_TTL_MS
    lookup_url: str = DEFAULT_LOOKUP_URL

    PERSISTED_FIELDS = (
        "use_dynamic_address",
        "testing_override_active",
        "static_default_address",
        "ttl_ms",
        "lookup_url",
    )

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "ResolverConfig":
        settings = settings or AppSettings()
        return cls(
            use_dynamic_address=settings.USE_DYNAMIC_SERVER_ADDRESS,
            testing_override_active=settings.TESTING_SERVER,
            static_default_address=settings.SERVER_ADDRESS,
            ttl_ms=settings.DYNAMIC_SERVER_ADDRESS_TTL_MS,
            lookup_url=settings.DYNAMIC_SERVER_ADDRESS_URL,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {key: data[key] for key in self.PERSISTED_FIELDS}

    def update(self, values: Mapping[str, Any]) -> None:
        """Apply persisted values, ignoring unknown keys and mistyped entries."""
        for key in self.PERSISTED_FIELDS:
            if key not in values:
                continue
            value = values[key]
            current = getattr(self, key)
            # bool is an int subclass; keep flags and the TTL apart
            if isinstance(current, bool) and not isinstance(value, bool):
                continue
            if isinstance(current, int) and not isinstance(current, bool):
                if isinstance(value, bool) or not isinstance(value, int):
                    continue
            if isinstance(current, str) and not isinstance(value, str):
                continue
            setattr(self, key, value)
