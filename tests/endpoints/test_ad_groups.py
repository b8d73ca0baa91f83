"""Tests for gads_proxy/endpoints/ad_groups.py"""

from unittest.mock import patch

import pytest

from gads_proxy.endpoints.ad_groups import (
    AD_GROUP_AD_SELECT,
    build_asset_group_bundles,
    build_query,
    format_ad,
    format_metrics,
    get_ad_groups,
    group_by_ad_group,
)
from gads_proxy.google_ads.errors import QueryFailed


def ad_row(ad_group_id="100", ad_id="1000", ad_group_name="Shoes", clicks="5"):
    """An ad_group_ad row as returned by the REST API."""
    return {
        "campaign": {"id": "10", "name": "Brand"},
        "adGroup": {"id": ad_group_id, "name": ad_group_name, "status": "ENABLED", "type": "SEARCH_STANDARD"},
        "adGroupAd": {
            "status": "ENABLED",
            "ad": {
                "id": ad_id,
                "type": "RESPONSIVE_SEARCH_AD",
                "responsiveSearchAd": {
                    "headlines": [{"text": "Running Shoes"}, {"text": "Free Shipping"}],
                    "descriptions": [{"text": "Shop the new range."}],
                    "path1": "shoes",
                },
            },
        },
        "metrics": {"impressions": "120", "clicks": clicks, "ctr": 0.0417, "costMicros": "2500000"},
    }


ASSET_GROUPS = [
    {"assetGroup": {"id": "7", "name": "PMax Spring", "status": "ENABLED"}, "campaign": {"id": "10"}},
    {"assetGroup": {"id": "8", "name": "PMax Summer", "status": "PAUSED"}, "campaign": {"id": "10"}},
]

ASSET_ROWS = [
    {"assetGroup": {"id": "7"}, "assetGroupAsset": {"fieldType": "HEADLINE"},
     "asset": {"textAsset": {"text": "Spring Sale"}}},
    {"assetGroup": {"id": "7"}, "assetGroupAsset": {"fieldType": "LONG_HEADLINE"},
     "asset": {"textAsset": {"text": "Everything for spring, delivered"}}},
    {"assetGroup": {"id": "7"}, "assetGroupAsset": {"fieldType": "DESCRIPTION"},
     "asset": {"textAsset": {"text": "Up to 40% off."}}},
    {"assetGroup": {"id": "7"}, "assetGroupAsset": {"fieldType": "MARKETING_IMAGE"},
     "asset": {"imageAsset": {"fullSize": {"url": "https://tpc.googlesyndication.com/img.png"}}}},
    {"assetGroup": {"id": "7"}, "assetGroupAsset": {"fieldType": "YOUTUBE_VIDEO"},
     "asset": {"youtubeVideoAsset": {"youtubeVideoId": "dQw4w9WgXcQ"}}},
    {"assetGroup": {"id": "99"}, "assetGroupAsset": {"fieldType": "HEADLINE"},
     "asset": {"textAsset": {"text": "Orphan"}}},
]


class TestBuildQuery:
    def test_without_campaign(self):
        query = build_query(AD_GROUP_AD_SELECT, "ad_group.id")
        assert "WHERE" not in query
        assert query.endswith("ORDER BY ad_group.id")

    def test_where_precedes_order_by(self):
        query = build_query(AD_GROUP_AD_SELECT, "ad_group.id", "42")
        assert "WHERE campaign.id = 42" in query
        assert query.index("WHERE") < query.index("ORDER BY")


class TestFormatMetrics:
    def test_converts_cost(self):
        metrics = format_metrics({"impressions": "120", "clicks": "5", "ctr": 0.0417, "costMicros": "2500000"})
        assert metrics == {"impressions": 120, "clicks": 5, "ctr": 0.0417,
                           "cost_micros": 2500000, "cost": 2.5}

    def test_zero_filled(self):
        assert format_metrics(None) == {"impressions": 0, "clicks": 0, "ctr": 0.0,
                                        "cost_micros": 0, "cost": 0.0}


class TestFormatAd:
    def test_responsive_search_ad(self):
        ad = format_ad(ad_row())
        assert ad["id"] == "1000"
        assert ad["name"] == "Unnamed Ad"
        assert ad["type"] == "RESPONSIVE_SEARCH_AD"
        assert ad["status"] == "ENABLED"
        assert ad["headlines"] == ["Running Shoes", "Free Shipping"]
        assert ad["descriptions"] == ["Shop the new range."]
        assert ad["path1"] == "shoes"
        assert ad["path2"] is None
        assert ad["metrics"]["cost"] == 2.5

    def test_non_rsa_has_no_text_fields(self):
        row = {"adGroupAd": {"status": "PAUSED", "ad": {"id": "5", "type": "IMAGE_AD"}}}
        ad = format_ad(row)
        assert "headlines" not in ad
        assert ad["status"] == "PAUSED"


class TestGroupByAdGroup:
    def test_groups_in_first_seen_order(self):
        rows = [ad_row("100", "1"), ad_row("200", "2", "Boots"), ad_row("100", "3")]
        groups = group_by_ad_group(rows)

        assert [g["id"] for g in groups] == ["100", "200"]
        assert [a["id"] for a in groups[0]["ads"]] == ["1", "3"]
        assert groups[1]["name"] == "Boots"

    def test_duplicate_ads_kept_once(self):
        groups = group_by_ad_group([ad_row("100", "1"), ad_row("100", "1", clicks="9")])
        assert len(groups[0]["ads"]) == 1
        assert groups[0]["ads"][0]["metrics"]["clicks"] == 5

    def test_rows_without_ad_group_dropped(self):
        assert group_by_ad_group([{"campaign": {"id": "10"}}]) == []

    def test_no_internal_keys_leak(self):
        groups = group_by_ad_group([ad_row()])
        assert set(groups[0]) == {"id", "name", "status", "type", "ads"}


class TestBuildAssetGroupBundles:
    def test_bundles_assets_by_field_type(self):
        bundles = build_asset_group_bundles(ASSET_GROUPS, ASSET_ROWS)

        assert [b["id"] for b in bundles] == ["7", "8"]
        spring = bundles[0]
        assert spring["type"] == "ASSET_GROUP"
        assert spring["name"] == "PMax Spring"

        bundle_ad = spring["ads"][0]
        assert bundle_ad["id"] == "7-assets"
        assert bundle_ad["assets"] == {
            "headlines": ["Spring Sale", "Everything for spring, delivered"],
            "descriptions": ["Up to 40% off."],
            "images": ["https://tpc.googlesyndication.com/img.png"],
            "videos": ["dQw4w9WgXcQ"],
        }

    def test_group_without_assets_has_empty_bundle(self):
        bundles = build_asset_group_bundles(ASSET_GROUPS, ASSET_ROWS)
        summer = bundles[1]
        assert summer["status"] == "PAUSED"
        assert summer["ads"][0]["assets"] == {"headlines": [], "descriptions": [], "images": [], "videos": []}


class TestGetAdGroups:
    PARAMS = {"customer_id": "123-456-7890", "refresh_token": "rt1"}

    def test_missing_parameters(self, api):
        response = get_ad_groups({"customer_id": "1234567890"}, api)
        assert response.status == 400

    def test_ad_group_ads(self, api):
        rows = [ad_row("100", "1"), ad_row("200", "2", "Boots")]
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", return_value=rows) as execute:
            response = get_ad_groups(self.PARAMS, api)

        assert response.status == 200
        assert response.body["count"] == 2
        assert "campaign_id" not in response.body
        execute.assert_called_once()
        customer_id, access_token, query, mcc_id, refresh_token = execute.call_args.args
        assert (customer_id, access_token, mcc_id, refresh_token) == ("1234567890", "at", None, "rt1")
        assert "FROM ad_group_ad" in query

    def test_campaign_filter(self, api):
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", return_value=[ad_row()]) as execute:
            response = get_ad_groups({**self.PARAMS, "campaign_id": "10"}, api)

        assert response.body["campaign_id"] == "10"
        query = execute.call_args.args[2]
        assert query.index("WHERE campaign.id = 10") < query.index("ORDER BY")

    def test_falls_back_to_asset_groups(self, api):
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", side_effect=[[], ASSET_GROUPS, ASSET_ROWS]) as execute:
            response = get_ad_groups(self.PARAMS, api)

        assert execute.call_count == 3
        assert "FROM asset_group\n" in execute.call_args_list[1].args[2]
        assert "FROM asset_group_asset" in execute.call_args_list[2].args[2]
        assert response.status == 200
        assert [g["type"] for g in response.body["ad_groups"]] == ["ASSET_GROUP", "ASSET_GROUP"]

    def test_no_asset_groups_means_empty_result(self, api):
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", side_effect=[[], []]) as execute:
            response = get_ad_groups(self.PARAMS, api)

        assert execute.call_count == 2
        assert response.body["ad_groups"] == []
        assert response.body["count"] == 0

    def test_asset_query_failure_tolerated(self, api, caplog):
        failure = QueryFailed("Google Ads API error (400): unrecognized field", status_code=400)
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", side_effect=[[], ASSET_GROUPS, failure]):
            response = get_ad_groups(self.PARAMS, api)

        assert response.status == 200
        assert response.body["count"] == 2
        assert response.body["ad_groups"][0]["ads"][0]["assets"]["headlines"] == []
        assert "asset_group_asset query failed" in caplog.text

    @pytest.mark.parametrize("campaign_id", ["abc", "-"])
    def test_invalid_campaign_id(self, api, campaign_id):
        with patch.object(api.executor, "execute") as execute:
            response = get_ad_groups({**self.PARAMS, "campaign_id": campaign_id}, api)

        assert response.status == 400
        execute.assert_not_called()
