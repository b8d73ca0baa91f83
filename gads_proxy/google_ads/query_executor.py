"""
Google Ads Query Executor

Runs GAQL queries against the Google Ads REST API.
Handles request headers, the single retry after a 401, and response decoding.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from ..common.config_loader import GoogleAdsSettings
from ..common.error_logger import mask_token
from .errors import InvalidArgument, QueryFailed
from .normalizer import decode_response, normalize_customer_id
from .token_cache import AccessTokenProvider

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401


def _response_payload(response: requests.Response) -> Any:
    """Response body, parsed when it is JSON."""
    text = response.text
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return text


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


class QueryExecutor:
    """
    GAQL client for the Google Ads REST API.

    Handles:
    - Customer / MCC ID normalization
    - developer-token and login-customer-id headers
    - One transparent retry with a fresh token after a 401
    - Both search (single JSON) and searchStream (chunked) bodies

    Usage:
        provider = AccessTokenProvider(settings)
        executor = QueryExecutor(settings, provider)

        access_token = provider.get_access_token(refresh_token)
        rows = executor.execute("123-456-7890", access_token, query,
                                refresh_token=refresh_token)
    """

    def __init__(
        self,
        settings: GoogleAdsSettings,
        token_provider: AccessTokenProvider,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.token_provider = token_provider
        self.session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    @property
    def base_url(self) -> str:
        return f"{self.settings.api_base_url}/{self.settings.api_version}"

    def search_url(self, customer_id: str) -> str:
        method = self.settings.search_mode
        return f"{self.base_url}/customers/{customer_id}/googleAds:{method}"

    def _headers(self, access_token: str, login_customer_id: Optional[str]) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "developer-token": self.settings.developer_token or "",
            "Content-Type": "application/json",
        }

        mcc_id = login_customer_id or self.settings.manager_id
        if mcc_id:
            headers["login-customer-id"] = normalize_customer_id(mcc_id, "login_customer_id")
        else:
            logger.warning("No login-customer-id header: no login_customer_id and no manager ID configured")
        return headers

    def _post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> requests.Response:
        try:
            return self.session.post(
                url, headers=headers, json=payload, timeout=self.settings.request_timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("Request failed: %s %s", url, e)
            raise QueryFailed(f"Google Ads API request failed: {e}") from e

    def execute(
        self,
        customer_id: str,
        access_token: str,
        query: str,
        login_customer_id: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> List[dict]:
        """
        Execute a GAQL query and return the result rows.

        Args:
            customer_id: Google Ads customer ID (dashes allowed)
            access_token: OAuth access token
            query: GAQL query, sent as-is
            login_customer_id: MCC ID for the login-customer-id header
                (defaults to the configured manager ID)
            refresh_token: Enables one retry with a fresh token after a 401

        Returns:
            Result rows in provider order

        Raises:
            InvalidArgument: customer_id, access_token or query missing
            QueryFailed: Non-success response (after the retry, if any)
            MalformedResponse: Body matches neither response encoding
        """
        if not customer_id or not access_token or not query:
            raise InvalidArgument("customer_id, access_token, and query are required")

        normalized_customer_id = normalize_customer_id(customer_id)
        headers = self._headers(access_token, login_customer_id)
        url = self.search_url(normalized_customer_id)
        payload = {"query": query}

        logger.debug("POST %s (token %s, login-customer-id %s)",
                     url, mask_token(access_token), headers.get("login-customer-id", "none"))

        response = self._post(url, headers, payload)
        retried = False

        if response.status_code == UNAUTHORIZED and refresh_token:
            logger.warning("Received 401 for customer %s, refreshing token and retrying once",
                           normalized_customer_id)
            self.token_provider.invalidate(refresh_token)
            new_access_token = self.token_provider.get_access_token(refresh_token)
            headers = {**headers, "Authorization": f"Bearer {new_access_token}"}
            response = self._post(url, headers, payload)
            retried = True

        if not _is_success(response):
            details = _response_payload(response)
            suffix = " after token refresh" if retried else ""
            logger.error("Google Ads API error %d%s for customer %s",
                         response.status_code, suffix, normalized_customer_id)
            raise QueryFailed(
                f"Google Ads API error ({response.status_code}){suffix}: {json.dumps(details, default=str)}",
                details=details,
                status_code=response.status_code,
                retried=retried,
            )

        rows = decode_response(response.text)
        logger.debug("Parsed %d rows from googleAds:%s for customer %s",
                     len(rows), self.settings.search_mode, normalized_customer_id)
        return rows

    def create_customer_client(
        self,
        manager_customer_id: str,
        access_token: str,
        customer_client: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Create a client account under a manager (MCC) account.

        Args:
            manager_customer_id: MCC that will own the new account
            access_token: OAuth access token
            customer_client: Customer fields in REST (camelCase) form

        Returns:
            Provider response JSON (contains resourceName)

        Raises:
            QueryFailed: Non-success response
        """
        manager_id = normalize_customer_id(manager_customer_id, "manager_customer_id")
        url = f"{self.base_url}/customers/{manager_id}:createCustomerClient"
        headers = self._headers(access_token, manager_id)

        response = self._post(url, headers, {"customerClient": customer_client})

        if not _is_success(response):
            details = _response_payload(response)
            logger.error("createCustomerClient failed with HTTP %d", response.status_code)
            raise QueryFailed(
                f"Google Ads API error ({response.status_code}): {json.dumps(details, default=str)}",
                details=details,
                status_code=response.status_code,
            )

        result = _response_payload(response)
        if not isinstance(result, dict):
            result = {"raw": result}
        logger.info("Created customer client: %s", result.get("resourceName", "unknown"))
        return result
