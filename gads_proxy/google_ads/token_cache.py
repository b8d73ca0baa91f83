"""
OAuth Access Token Cache

Exchanges refresh tokens for short-lived access tokens and caches them
per refresh token for the lifetime of the process.

The cache is read and written by concurrent requests without a lock:
entries are replaced, never mutated, and dict get/set/pop are atomic in
CPython. Two requests racing on a stale entry both refresh; the last
write wins and either token is valid.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

import requests

from ..common.config_loader import GoogleAdsSettings
from ..common.constants import DEFAULT_TOKEN_LIFETIME, TOKEN_EXPIRY_MARGIN
from ..common.error_logger import mask_token, sanitize_details
from .errors import MissingCredential, TokenRefreshFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessTokenCacheEntry:
    """Cached access token for one refresh token."""
    refresh_token_key: str
    access_token: str
    expires_at: float       # epoch seconds, margin already subtracted

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenCache:
    """
    In-memory store of access tokens keyed by refresh token.

    Owned by whoever creates it; pass one instance to the provider so tests
    can build isolated caches and inspect them directly. No eviction: the
    number of keys is bounded by the distinct refresh tokens in use.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, AccessTokenCacheEntry] = {}

    def get(self, refresh_token: str) -> Optional[AccessTokenCacheEntry]:
        """Return the entry for a refresh token, fresh or not."""
        return self._entries.get(refresh_token)

    def set(self, entry: AccessTokenCacheEntry) -> None:
        self._entries[entry.refresh_token_key] = entry

    def invalidate(self, refresh_token: str) -> None:
        """Drop the entry for a refresh token, if any."""
        self._entries.pop(refresh_token, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, refresh_token: object) -> bool:
        return refresh_token in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class AccessTokenProvider:
    """
    Returns a usable access token for a refresh token, refreshing on demand.

    Usage:
        provider = AccessTokenProvider(settings)
        access_token = provider.get_access_token(refresh_token)

        # after the API answers 401:
        provider.invalidate(refresh_token)
        access_token = provider.get_access_token(refresh_token)
    """

    def __init__(
        self,
        settings: GoogleAdsSettings,
        cache: Optional[TokenCache] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else TokenCache()
        self.session = session or requests.Session()
        self.clock = clock

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def _resolve_refresh_token(self, refresh_token: Optional[str]) -> str:
        token = refresh_token or self.settings.refresh_token
        if not token:
            raise MissingCredential(
                "Refresh token is required (provide via parameter or "
                "GADS_REFRESH_TOKEN/REFRESH_TOKEN env var)"
            )
        return token

    def get_access_token(self, refresh_token: Optional[str] = None) -> str:
        """
        Get an access token, from cache when the cached one is still live.

        Args:
            refresh_token: OAuth refresh token; falls back to settings.refresh_token

        Returns:
            Access token string

        Raises:
            MissingCredential: No refresh token from either source
            TokenRefreshFailed: Token endpoint rejected the refresh
        """
        token = self._resolve_refresh_token(refresh_token)

        now = self.clock()
        cached = self.cache.get(token)
        if cached is not None and cached.is_valid(now):
            logger.debug("Using cached access token for %s", mask_token(token))
            return cached.access_token

        return self._refresh(token, now)

    def invalidate(self, refresh_token: str) -> None:
        """Forget the cached access token; next get_access_token() refreshes."""
        logger.info("Invalidating cached access token for %s", mask_token(refresh_token))
        self.cache.invalidate(refresh_token)

    def _refresh(self, refresh_token: str, now: float) -> str:
        logger.info("Refreshing access token for %s", mask_token(refresh_token))

        data = {
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }

        try:
            response = self.session.post(
                self.settings.token_url, data=data, timeout=self.settings.request_timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("Token refresh request failed: %s", e)
            raise TokenRefreshFailed(f"Token refresh request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if response.status_code >= 400 or not access_token:
            details = sanitize_details(payload)
            logger.error("Failed to refresh access token (HTTP %d): %s",
                         response.status_code, details)
            raise TokenRefreshFailed(
                f"Failed to refresh token: {details}",
                details=details,
                status_code=response.status_code,
            )

        expires_in = payload.get("expires_in")
        if expires_in is None:
            expires_in = DEFAULT_TOKEN_LIFETIME
        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError) as e:
            logger.error("Token endpoint returned invalid expires_in: %r", expires_in)
            raise TokenRefreshFailed(
                f"Invalid expires_in in token response: {expires_in!r}",
                details=sanitize_details(payload),
                status_code=response.status_code,
            ) from e

        entry = AccessTokenCacheEntry(
            refresh_token_key=refresh_token,
            access_token=access_token,
            expires_at=now + expires_in - TOKEN_EXPIRY_MARGIN,
        )
        self.cache.set(entry)

        logger.info("New access token cached for %s (expires in %ds)",
                    mask_token(refresh_token), expires_in - TOKEN_EXPIRY_MARGIN)
        return access_token
