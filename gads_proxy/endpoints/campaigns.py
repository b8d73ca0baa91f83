"""
Campaign Discovery Endpoint

GET /api/campaigns: campaign metadata for a customer account.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from ..google_ads.api import GoogleAdsApi
from ..google_ads.normalizer import get_field, normalize_customer_id
from .base import EndpointResponse, endpoint, missing_parameters, param

logger = logging.getLogger(__name__)

CAMPAIGNS_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      campaign.status,
      campaign.serving_status,
      campaign.advertising_channel_type,
      campaign.advertising_channel_sub_type,
      campaign.start_date,
      campaign.end_date,
      campaign.bidding_strategy_type
    FROM campaign
    WHERE campaign.status IN ('ENABLED', 'PAUSED', 'REMOVED')
    ORDER BY campaign.id
"""


def format_campaign(campaign: Dict[str, Any]) -> Dict[str, Any]:
    """Map a campaign resource to the response shape."""
    campaign_id = get_field(campaign, "id")
    return {
        "id": str(campaign_id) if campaign_id is not None else None,
        "name": get_field(campaign, "name") or "Unnamed Campaign",
        "status": get_field(campaign, "status") or "UNKNOWN",
        "serving_status": get_field(campaign, "serving_status") or "UNKNOWN",
        "advertising_channel_type": get_field(campaign, "advertising_channel_type") or "UNKNOWN",
        "advertising_channel_sub_type": get_field(campaign, "advertising_channel_sub_type"),
        "start_date": get_field(campaign, "start_date"),
        "end_date": get_field(campaign, "end_date"),
        "bidding_strategy_type": get_field(campaign, "bidding_strategy_type"),
    }


@endpoint("GET /api/campaigns")
def get_campaigns(params: Mapping[str, Any], api: GoogleAdsApi) -> EndpointResponse:
    customer_id = param(params, "customer_id")
    refresh_token = param(params, "refresh_token")
    login_customer_id = param(params, "login_customer_id")

    if not customer_id or not refresh_token:
        return missing_parameters("Both customer_id and refresh_token are required")

    customer_id = normalize_customer_id(customer_id)
    mcc_id = normalize_customer_id(login_customer_id, "login_customer_id") if login_customer_id else None

    access_token = api.token_provider.get_access_token(refresh_token)
    rows = api.executor.execute(customer_id, access_token, CAMPAIGNS_QUERY, mcc_id, refresh_token)

    campaigns: List[Dict[str, Any]] = [
        format_campaign(row["campaign"]) for row in rows if isinstance(row.get("campaign"), dict)
    ]
    logger.info("Found %d campaigns for customer %s", len(campaigns), customer_id)

    return EndpointResponse(200, {
        "success": True,
        "count": len(campaigns),
        "campaigns": campaigns,
    })
