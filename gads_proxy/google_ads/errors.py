"""
Google Ads proxy errors.

Every failure the token provider, executor or normalizer can raise is a
GoogleAdsProxyError, so endpoint handlers catch a single base class.
"""

from typing import Any, Optional


class GoogleAdsProxyError(Exception):
    """Base class for proxy failures. `details` carries the provider payload."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class MissingCredential(GoogleAdsProxyError):
    """No refresh token available from the caller or the configuration."""


class InvalidArgument(GoogleAdsProxyError):
    """A required argument is missing or malformed; no network call was made."""


class TokenRefreshFailed(GoogleAdsProxyError):
    """The OAuth token endpoint rejected the refresh or returned no access token."""

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message, details)
        self.status_code = status_code


class QueryFailed(GoogleAdsProxyError):
    """Non-success response from the Google Ads API (after the auth retry, if any)."""

    def __init__(
        self,
        message: str,
        details: Any = None,
        status_code: Optional[int] = None,
        retried: bool = False,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.retried = retried


class MalformedResponse(GoogleAdsProxyError):
    """Response body could not be decoded as a search or stream response."""

    def __init__(self, message: str, body_excerpt: str = ""):
        super().__init__(message, body_excerpt)
        self.body_excerpt = body_excerpt
