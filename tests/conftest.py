"""Shared test fixtures."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from gads_proxy.common.config_loader import GoogleAdsSettings
from gads_proxy.google_ads import AccessTokenProvider, GoogleAdsApi, QueryExecutor, TokenCache

NOW = 1_700_000_000.0


class FakeClock:
    """Settable stand-in for time.time."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code=200, payload=None, text=None):
    """Build a requests.Response-like mock with .status_code, .text and .json()."""
    response = MagicMock()
    response.status_code = status_code
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    response.text = text
    if payload is not None:
        response.json.return_value = payload
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


def token_response(access_token="ya29.fresh-access-token", expires_in=3599):
    payload = {"access_token": access_token, "token_type": "Bearer"}
    if expires_in is not None:
        payload["expires_in"] = expires_in
    return make_response(200, payload)


@pytest.fixture
def settings():
    return GoogleAdsSettings(
        client_id="client-id.apps.googleusercontent.com",
        client_secret="client-secret",
        developer_token="dev-token-123",
        manager_id="999-888-7777",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache():
    return TokenCache()


@pytest.fixture
def provider(settings, cache, clock):
    return AccessTokenProvider(settings, cache=cache, session=requests.Session(), clock=clock)


@pytest.fixture
def executor(settings, provider):
    return QueryExecutor(settings, provider, session=requests.Session())


@pytest.fixture
def api(settings, provider, executor):
    """GoogleAdsApi whose provider and executor have separate sessions to patch."""
    return GoogleAdsApi(settings=settings, token_provider=provider, executor=executor)


@pytest.fixture
def campaign_rows():
    """Rows as the REST /search endpoint returns them (camelCase inside resources)."""
    return [
        {"campaign": {"resourceName": "customers/1234567890/campaigns/1", "id": "1",
                      "name": "Brand", "status": "ENABLED", "servingStatus": "SERVING",
                      "advertisingChannelType": "SEARCH", "startDate": "2024-01-01",
                      "biddingStrategyType": "TARGET_CPA"}},
        {"campaign": {"resourceName": "customers/1234567890/campaigns/2", "id": "2",
                      "name": "Generic", "status": "PAUSED"}},
    ]
