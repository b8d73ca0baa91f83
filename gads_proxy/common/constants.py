"""
Shared constants for the project.

Single source of truth for Google Ads API endpoints and token lifetimes.
"""

# Google Ads REST API version
GOOGLE_ADS_API_VERSION = "v22"

GOOGLE_ADS_API_BASE_URL = "https://googleads.googleapis.com"
OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"

# Search endpoints: single JSON document vs. chunked stream
SEARCH_MODE_SEARCH = "search"
SEARCH_MODE_STREAM = "searchStream"
SEARCH_MODES = frozenset({SEARCH_MODE_SEARCH, SEARCH_MODE_STREAM})

# Lifetime assumed when the token endpoint omits expires_in (seconds)
DEFAULT_TOKEN_LIFETIME = 3600
# Cached tokens expire this many seconds before the provider says they do
TOKEN_EXPIRY_MARGIN = 300

DEFAULT_REQUEST_TIMEOUT = 30

MICROS_PER_UNIT = 1_000_000
