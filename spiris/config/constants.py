"""Pure constants for the Spiris client. No side effects at import time."""

from pathlib import Path

# === API ===
# The endpoint is unchanged since the Visma eAccounting rebrand
DEFAULT_BASE_URL = "https://eaccountingapi.vismaonline.com/v2/"
DEFAULT_AUTH_URL = "https://identity.vismaonline.com/connect/authorize"
DEFAULT_TOKEN_URL = "https://identity.vismaonline.com/connect/token"
DEFAULT_SCOPES = ("ea:api", "ea:sales", "offline_access")
USER_AGENT = "spiris-client-python"

# === Timeouts (seconds) ===
DEFAULT_REQUEST_TIMEOUT = 30.0

# === Retry ===
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 0.5
DEFAULT_MAX_DELAY = 30.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_MAX_ELAPSED = 120.0

# === Rate Limit ===
# 600 requests per minute per client per endpoint
RATE_LIMIT_PER_MINUTE = 600
DEFAULT_BURST_SIZE = 10

# === Pagination ===
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
MAX_CONSECUTIVE_EMPTY_PAGES = 1

# === Tokens ===
TOKEN_EXPIRY_BUFFER_SECONDS = 300  # refresh 5 minutes early
DEFAULT_TOKEN_LIFETIME = 3600
DEFAULT_TOKEN_FILE = Path.home() / ".spiris" / "token.json"
