"""
Ad Group / Ad Data Retrieval Endpoint

GET /api/adgroups: ad groups with their ads and metrics, optionally for one
campaign. Accounts whose campaigns have no ad_group_ad rows (Performance
Max, Demand Gen) are read through asset groups instead: each asset group
becomes an ad group holding one bundle "ad" with its text, image and video
assets.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..common.constants import MICROS_PER_UNIT
from ..google_ads.api import GoogleAdsApi
from ..google_ads.errors import GoogleAdsProxyError
from ..google_ads.normalizer import get_field, normalize_customer_id
from .base import EndpointResponse, endpoint, missing_parameters, param, to_float, to_int

logger = logging.getLogger(__name__)

ASSET_GROUP_TYPE = "ASSET_GROUP"

AD_GROUP_AD_SELECT = """
    SELECT
      campaign.id,
      campaign.name,
      ad_group.id,
      ad_group.name,
      ad_group.status,
      ad_group.type,
      ad_group_ad.ad.id,
      ad_group_ad.ad.name,
      ad_group_ad.ad.type,
      ad_group_ad.status,
      ad_group_ad.ad.responsive_search_ad.headlines,
      ad_group_ad.ad.responsive_search_ad.descriptions,
      ad_group_ad.ad.responsive_search_ad.path1,
      ad_group_ad.ad.responsive_search_ad.path2,
      metrics.impressions,
      metrics.clicks,
      metrics.ctr,
      metrics.cost_micros
    FROM ad_group_ad
"""

ASSET_GROUP_SELECT = """
    SELECT
      asset_group.id,
      asset_group.name,
      asset_group.status,
      campaign.id
    FROM asset_group
"""

ASSET_GROUP_ASSET_SELECT = """
    SELECT
      asset_group.id,
      asset_group_asset.field_type,
      asset_group_asset.status,
      asset.text_asset.text,
      asset.image_asset.full_size.url,
      asset.youtube_video_asset.youtube_video_id
    FROM asset_group_asset
"""

HEADLINE_FIELD_TYPES = frozenset({"HEADLINE", "LONG_HEADLINE"})
DESCRIPTION_FIELD_TYPES = frozenset({"DESCRIPTION"})
IMAGE_FIELD_TYPES = frozenset({"MARKETING_IMAGE", "LOGO"})
VIDEO_FIELD_TYPES = frozenset({"YOUTUBE_VIDEO"})


def build_query(select: str, order_by: str, campaign_id: Optional[str] = None) -> str:
    """Append the optional campaign filter and the ordering to a SELECT ... FROM clause."""
    query = select.rstrip()
    if campaign_id:
        query += f"\n    WHERE campaign.id = {campaign_id}"
    return f"{query}\n    ORDER BY {order_by}"


def format_metrics(metrics: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Ad metrics, zero-filled; cost converted from micros."""
    metrics = metrics or {}
    cost_micros = to_int(get_field(metrics, "cost_micros"))
    return {
        "impressions": to_int(get_field(metrics, "impressions")),
        "clicks": to_int(get_field(metrics, "clicks")),
        "ctr": to_float(get_field(metrics, "ctr")),
        "cost_micros": cost_micros,
        "cost": cost_micros / MICROS_PER_UNIT,
    }


def _asset_texts(assets: Any) -> List[str]:
    return [get_field(a, "text") for a in assets or [] if get_field(a, "text")]


def format_ad(row: Dict[str, Any], default_type: str = "UNKNOWN") -> Dict[str, Any]:
    """Map an ad_group_ad row to an ad entry."""
    ad = get_field(row, "ad_group_ad.ad") or {}
    entry: Dict[str, Any] = {
        "id": str(get_field(ad, "id")),
        "name": get_field(ad, "name") or "Unnamed Ad",
        "type": get_field(ad, "type") or default_type,
        "status": get_field(row, "ad_group_ad.status") or "UNKNOWN",
    }

    rsa = get_field(ad, "responsive_search_ad")
    if rsa:
        entry["headlines"] = _asset_texts(get_field(rsa, "headlines"))
        entry["descriptions"] = _asset_texts(get_field(rsa, "descriptions"))
        entry["path1"] = get_field(rsa, "path1")
        entry["path2"] = get_field(rsa, "path2")

    entry["metrics"] = format_metrics(row.get("metrics"))
    return entry


def group_by_ad_group(rows: List[Dict[str, Any]], default_type: str = "UNKNOWN") -> List[Dict[str, Any]]:
    """
    Group ad rows by ad group, keeping first-seen order.

    Rows without an ad group ID are dropped; an ad appearing twice in the
    same group is kept once.
    """
    groups: Dict[str, Dict[str, Any]] = {}

    for row in rows:
        ad_group_id = get_field(row, "ad_group.id")
        if ad_group_id is None:
            continue
        ad_group_id = str(ad_group_id)

        group = groups.get(ad_group_id)
        if group is None:
            group = groups[ad_group_id] = {
                "id": ad_group_id,
                "name": get_field(row, "ad_group.name") or "Unnamed Ad Group",
                "status": get_field(row, "ad_group.status") or "UNKNOWN",
                "type": get_field(row, "ad_group.type") or default_type,
                "ads": [],
                "_ad_ids": set(),
            }

        ad_id = get_field(row, "ad_group_ad.ad.id")
        if ad_id is not None and str(ad_id) not in group["_ad_ids"]:
            group["_ad_ids"].add(str(ad_id))
            group["ads"].append(format_ad(row, default_type))

    for group in groups.values():
        del group["_ad_ids"]
    return list(groups.values())


def build_asset_group_bundles(
    asset_groups: List[Dict[str, Any]],
    asset_rows: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Turn asset groups and their asset links into ad groups with one bundle ad each."""
    bundles: Dict[str, Dict[str, Any]] = {}

    for row in asset_groups:
        group_id = get_field(row, "asset_group.id")
        if group_id is None:
            continue
        group_id = str(group_id)
        bundles[group_id] = {
            "id": group_id,
            "name": get_field(row, "asset_group.name") or "Unnamed Asset Group",
            "status": get_field(row, "asset_group.status") or "UNKNOWN",
            "type": ASSET_GROUP_TYPE,
            "ads": [{
                "id": f"{group_id}-assets",
                "name": "Asset Group Bundle",
                "type": ASSET_GROUP_TYPE,
                "status": "ENABLED",
                "assets": {"headlines": [], "descriptions": [], "images": [], "videos": []},
                "metrics": format_metrics(None),
            }],
        }

    for row in asset_rows:
        group_id = get_field(row, "asset_group.id")
        bundle = bundles.get(str(group_id)) if group_id is not None else None
        if bundle is None:
            continue
        assets = bundle["ads"][0]["assets"]

        field_type = get_field(row, "asset_group_asset.field_type")
        text = get_field(row, "asset.text_asset.text")
        image_url = get_field(row, "asset.image_asset.full_size.url")
        video_id = get_field(row, "asset.youtube_video_asset.youtube_video_id")

        if text and field_type in HEADLINE_FIELD_TYPES:
            assets["headlines"].append(text)
        if text and field_type in DESCRIPTION_FIELD_TYPES:
            assets["descriptions"].append(text)
        if image_url and field_type in IMAGE_FIELD_TYPES:
            assets["images"].append(image_url)
        if video_id and field_type in VIDEO_FIELD_TYPES:
            assets["videos"].append(video_id)

    return list(bundles.values())


def _fetch_asset_group_bundles(
    api: GoogleAdsApi,
    customer_id: str,
    access_token: str,
    mcc_id: Optional[str],
    refresh_token: str,
    campaign_id: Optional[str],
) -> List[Dict[str, Any]]:
    query = build_query(ASSET_GROUP_SELECT, "campaign.id, asset_group.id", campaign_id)
    asset_groups = api.executor.execute(customer_id, access_token, query, mcc_id, refresh_token)
    logger.debug("asset_group query returned %d groups", len(asset_groups))
    if not asset_groups:
        return []

    query = build_query(ASSET_GROUP_ASSET_SELECT, "asset_group.id", campaign_id)
    try:
        asset_rows = api.executor.execute(customer_id, access_token, query, mcc_id, refresh_token)
    except GoogleAdsProxyError as e:
        # Groups are still listed, just without assets
        logger.warning("asset_group_asset query failed: %s", e)
        asset_rows = []

    return build_asset_group_bundles(asset_groups, asset_rows)


@endpoint("GET /api/adgroups")
def get_ad_groups(params: Mapping[str, Any], api: GoogleAdsApi) -> EndpointResponse:
    customer_id = param(params, "customer_id")
    refresh_token = param(params, "refresh_token")
    campaign_id = param(params, "campaign_id")
    login_customer_id = param(params, "login_customer_id")

    if not customer_id or not refresh_token:
        return missing_parameters("Both customer_id and refresh_token are required")

    customer_id = normalize_customer_id(customer_id)
    mcc_id = normalize_customer_id(login_customer_id, "login_customer_id") if login_customer_id else None
    if campaign_id:
        campaign_id = normalize_customer_id(campaign_id, "campaign_id")

    access_token = api.token_provider.get_access_token(refresh_token)

    query = build_query(AD_GROUP_AD_SELECT, "campaign.id, ad_group.id, ad_group_ad.ad.id", campaign_id)
    rows = api.executor.execute(customer_id, access_token, query, mcc_id, refresh_token)
    logger.debug("ad_group_ad query returned %d rows for customer %s", len(rows), customer_id)

    if rows:
        ad_groups = group_by_ad_group(rows)
    else:
        logger.info("No ad_group_ad rows for customer %s, trying asset groups", customer_id)
        ad_groups = _fetch_asset_group_bundles(
            api, customer_id, access_token, mcc_id, refresh_token, campaign_id
        )

    body: Dict[str, Any] = {"success": True}
    if campaign_id:
        body["campaign_id"] = campaign_id
    body["ad_groups"] = ad_groups
    body["count"] = len(ad_groups)

    logger.info("Returning %d ad groups for customer %s", len(ad_groups), customer_id)
    return EndpointResponse(200, body)
