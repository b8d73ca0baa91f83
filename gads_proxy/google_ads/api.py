"""
Google Ads API facade.

Bundles the settings, token provider and query executor that the
endpoint handlers share. One instance per process keeps one token cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from ..common.config_loader import GoogleAdsSettings, load_settings
from .query_executor import QueryExecutor
from .token_cache import AccessTokenProvider, TokenCache


@dataclass
class GoogleAdsApi:
    settings: GoogleAdsSettings
    token_provider: AccessTokenProvider
    executor: QueryExecutor

    @classmethod
    def from_settings(
        cls,
        settings: GoogleAdsSettings,
        cache: Optional[TokenCache] = None,
        session: Optional[requests.Session] = None,
    ) -> "GoogleAdsApi":
        """Build provider and executor sharing one HTTP session."""
        session = session or requests.Session()
        provider = AccessTokenProvider(settings, cache=cache, session=session)
        executor = QueryExecutor(settings, provider, session=session)
        return cls(settings=settings, token_provider=provider, executor=executor)

    @classmethod
    def from_config(cls, config_path: Optional[str] = None) -> "GoogleAdsApi":
        return cls.from_settings(load_settings(config_path))

    def close(self) -> None:
        self.executor.close()
        self.token_provider.close()
