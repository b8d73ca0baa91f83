"""
Campaign Metrics Endpoint

GET /api/ads-metrics: last 7 days of campaign performance.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from ..common.constants import MICROS_PER_UNIT
from ..google_ads.api import GoogleAdsApi
from ..google_ads.normalizer import get_field, normalize_customer_id
from .base import EndpointResponse, endpoint, missing_parameters, param, to_float, to_int

logger = logging.getLogger(__name__)

CAMPAIGN_METRICS_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      metrics.impressions,
      metrics.clicks,
      metrics.ctr,
      metrics.average_cpc
    FROM campaign
    WHERE segments.date DURING LAST_7_DAYS
"""


def format_campaign_metrics(row: Dict[str, Any]) -> Dict[str, Any]:
    campaign_id = get_field(row, "campaign.id")
    # average_cpc is a double in micros
    average_cpc_micros = to_float(get_field(row, "metrics.average_cpc"))
    return {
        "id": str(campaign_id) if campaign_id is not None else None,
        "name": get_field(row, "campaign.name") or "Unnamed Campaign",
        "impressions": to_int(get_field(row, "metrics.impressions")),
        "clicks": to_int(get_field(row, "metrics.clicks")),
        "ctr": to_float(get_field(row, "metrics.ctr")),
        "average_cpc_micros": average_cpc_micros,
        "average_cpc": average_cpc_micros / MICROS_PER_UNIT,
    }


@endpoint("GET /api/ads-metrics")
def get_ads_metrics(params: Mapping[str, Any], api: GoogleAdsApi) -> EndpointResponse:
    customer_id = param(params, "customer_id")
    refresh_token = param(params, "refresh_token")
    login_customer_id = param(params, "login_customer_id")

    if not customer_id or not refresh_token:
        return missing_parameters("Both customer_id and refresh_token are required")

    customer_id = normalize_customer_id(customer_id)
    mcc_id = normalize_customer_id(login_customer_id, "login_customer_id") if login_customer_id else None

    access_token = api.token_provider.get_access_token(refresh_token)
    rows = api.executor.execute(customer_id, access_token, CAMPAIGN_METRICS_QUERY, mcc_id, refresh_token)

    campaigns = [format_campaign_metrics(row) for row in rows if get_field(row, "campaign")]
    logger.info("Fetched 7-day metrics for %d campaigns (customer %s)", len(campaigns), customer_id)

    return EndpointResponse(200, {
        "success": True,
        "date_range": "LAST_7_DAYS",
        "count": len(campaigns),
        "campaigns": campaigns,
    })
