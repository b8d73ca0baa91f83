"""
MCC / Account List Endpoint

GET /api/mcc-accounts: client accounts under a manager (MCC) account.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from ..google_ads.api import GoogleAdsApi
from ..google_ads.normalizer import get_field, normalize_customer_id
from .base import EndpointResponse, endpoint, missing_parameters, param

logger = logging.getLogger(__name__)

CUSTOMER_CLIENTS_QUERY = """
    SELECT
      customer_client.id,
      customer_client.descriptive_name,
      customer_client.currency_code,
      customer_client.time_zone,
      customer_client.status,
      customer_client.manager,
      customer_client.test_account
    FROM customer_client
    WHERE customer_client.manager = false
    ORDER BY customer_client.descriptive_name
"""


def _manager_metrics_message(error_type: str, body: Dict[str, Any]) -> None:
    if error_type == "REQUESTED_METRICS_FOR_MANAGER":
        body["message"] = (
            "Cannot query metrics for manager accounts. "
            "Query individual client accounts instead."
        )


def format_account(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a customer_client row to the response shape."""
    client = get_field(row, "customer_client") or {}
    account_id = get_field(client, "id")
    return {
        "id": str(account_id) if account_id is not None else None,
        "name": get_field(client, "descriptive_name") or "Unnamed Account",
        "currency_code": get_field(client, "currency_code"),
        "time_zone": get_field(client, "time_zone"),
        "status": get_field(client, "status") or "UNKNOWN",
        "is_manager": bool(get_field(client, "manager", False)),
        "is_test_account": bool(get_field(client, "test_account", False)),
    }


@endpoint("GET /api/mcc-accounts", on_google_ads_error=_manager_metrics_message)
def get_mcc_accounts(params: Mapping[str, Any], api: GoogleAdsApi) -> EndpointResponse:
    refresh_token = param(params, "refresh_token")
    if not refresh_token:
        return missing_parameters("refresh_token is required")

    mcc_id = param(params, "manager_customer_id") or api.settings.manager_id
    if not mcc_id:
        return missing_parameters(
            "Either provide manager_customer_id in query or set GADS_MANAGER_ID environment variable",
            error="Missing MCC ID",
        )
    mcc_id = normalize_customer_id(mcc_id, "manager_customer_id")

    access_token = api.token_provider.get_access_token(refresh_token)

    # Query the MCC itself, in its own context
    rows = api.executor.execute(mcc_id, access_token, CUSTOMER_CLIENTS_QUERY, mcc_id, refresh_token)
    accounts = [format_account(row) for row in rows]
    logger.info("Found %d client accounts under MCC %s", len(accounts), mcc_id)

    return EndpointResponse(200, {
        "success": True,
        "manager_account_id": mcc_id,
        "count": len(accounts),
        "accounts": accounts,
    })
