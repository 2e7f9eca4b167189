"""Store keys, defaults and sync timings shared across feature modules."""

# Local store keys
REMOTE_CONFIG_KEY = "remoteConfig"
ADMIN_PASSWORD_KEY = "adminPassword"

DEFAULT_ADMIN_PASSWORD = "admin"
MIN_PASSWORD_LENGTH = 4

UNASSIGNED_TEAM = "Unassigned"

JSONBIN_BASE_URL = "https://api.jsonbin.io/v3/b"
DEFAULT_PUSH_DEBOUNCE_SECONDS = 2.0
DEFAULT_POLL_INTERVAL_SECONDS = 3.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0

WEEKLY_TARGET_HOURS = 5
MS_PER_HOUR = 60 * 60 * 1000
