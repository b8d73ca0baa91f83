"""
Google Ads REST integration.

Modules:
    token_cache    - Access token cache and OAuth refresh
    query_executor - GAQL execution with single 401 retry
    normalizer     - search / searchStream response decoding
    errors         - Error kinds raised by the above
    api            - Facade bundling provider and executor
"""

from .api import GoogleAdsApi
from .errors import (
    GoogleAdsProxyError,
    InvalidArgument,
    MalformedResponse,
    MissingCredential,
    QueryFailed,
    TokenRefreshFailed,
)
from .normalizer import (
    decode_response,
    decode_search_body,
    decode_stream_body,
    get_field,
    normalize_chunk,
    normalize_customer_id,
)
from .query_executor import QueryExecutor
from .token_cache import AccessTokenCacheEntry, AccessTokenProvider, TokenCache

__all__ = [
    # Facade
    'GoogleAdsApi',
    # Token cache
    'AccessTokenCacheEntry',
    'AccessTokenProvider',
    'TokenCache',
    # Query execution
    'QueryExecutor',
    # Normalizer
    'decode_response',
    'decode_search_body',
    'decode_stream_body',
    'get_field',
    'normalize_chunk',
    'normalize_customer_id',
    # Errors
    'GoogleAdsProxyError',
    'InvalidArgument',
    'MalformedResponse',
    'MissingCredential',
    'QueryFailed',
    'TokenRefreshFailed',
]
