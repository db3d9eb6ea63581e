"""
dynaddr - Dynamic Server Address Resolution

Resolves which backend server address a client should use: a testing override,
a remotely looked-up address cached with a TTL, or a static default.
"""

__version__ = "1.0.0"


# Lazy imports keep a bare ``import dynaddr`` free of httpx
def __getattr__(name):
    """Lazy loading of package components to avoid unnecessary imports."""
    if name == "AddressResolver":
        from .resolver import AddressResolver

        return AddressResolver
    elif name == "RefreshController":
        from .refresh import RefreshController

        return RefreshController
    elif name == "AddressStore":
        from .store import AddressStore

        return AddressStore
    elif name == "AddressFetcher":
        from .fetcher import AddressFetcher

        return AddressFetcher
    elif name == "create_service":
        from .core import create_service

        return create_service
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


# Define the public API of the package
__all__ = [
    "AddressResolver",
    "RefreshController",
    "AddressStore",
    "AddressFetcher",
    "create_service",
    "__version__",
]
