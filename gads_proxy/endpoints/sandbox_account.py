"""
Sandbox Account Endpoint

POST /api/create-test-account: creates a sandbox client account under the
configured manager (MCC) account.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..google_ads.api import GoogleAdsApi
from .base import EndpointResponse, endpoint, missing_parameters, param

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_NAME = "Test Account"
DEFAULT_CURRENCY = "USD"
DEFAULT_TIME_ZONE = "America/New_York"


@endpoint("POST /api/create-test-account")
def create_test_account(params: Mapping[str, Any], api: GoogleAdsApi) -> EndpointResponse:
    refresh_token = param(params, "refresh_token")
    if not refresh_token:
        return missing_parameters("refresh_token is required")

    manager_id = api.settings.manager_id
    if not manager_id:
        return missing_parameters("Set GADS_MANAGER_ID to the MCC that owns test accounts",
                                  error="Missing GADS_MANAGER_ID env var")

    customer_client = {
        "descriptiveName": param(params, "name") or DEFAULT_ACCOUNT_NAME,
        "currencyCode": param(params, "currency_code") or DEFAULT_CURRENCY,
        "timeZone": param(params, "time_zone") or DEFAULT_TIME_ZONE,
        "testAccount": True,
    }

    access_token = api.token_provider.get_access_token(refresh_token)
    result = api.executor.create_customer_client(manager_id, access_token, customer_client)

    # resourceName: customers/{manager_id}/customerClients/{new_id}
    resource_name = result.get("resourceName", "")
    customer_id = resource_name.rsplit("/", 1)[-1] if resource_name else None

    return EndpointResponse(200, {
        "success": True,
        "customer_id": customer_id,
        "resource_name": resource_name or None,
        "descriptive_name": customer_client["descriptiveName"],
        "response": result,
    })
