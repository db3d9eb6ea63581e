"""Centralized constants for all modules."""

# Compiled-in address used by staging and test deployments
TESTING_SERVER_ADDRESS = "http://localhost:8080"

# Fallback address when nothing else is configured
DEFAULT_SERVER_ADDRESS = "https://api.example.com"

# Remote lookup endpoint for the dynamic address
DEFAULT_LOOKUP_URL = "https://config.example.com/api/serverAddress"

# Timeouts / TTLs (milliseconds)
FETCH_TIMEOUT_MS = 5000
DEFAULT_TTL_MS = 60 * 60 * 1000  # 1 hour

# Headers
VERSION_HEADER = "X-EXT-VERSION"
SKIP_CACHE_HEADER = "X-SKIP-CACHE"

# Persisted state
DEFAULT_STATE_PATH = "data/server-address.json"

# Message names accepted by the inter-process trigger
MSG_FORCE_REFRESH = "forceRefreshServerAddress"
MSG_CLEAR_CACHE = "clearServerAddressCache"
MSG_GET_ADDRESS = "getServerAddress"
