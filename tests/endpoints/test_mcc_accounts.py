"""Tests for gads_proxy/endpoints/mcc_accounts.py"""

from unittest.mock import patch

from gads_proxy.common.config_loader import GoogleAdsSettings
from gads_proxy.endpoints.mcc_accounts import CUSTOMER_CLIENTS_QUERY, format_account, get_mcc_accounts
from gads_proxy.google_ads import GoogleAdsApi
from gads_proxy.google_ads.errors import QueryFailed

from conftest import make_response, token_response

CLIENT_ROWS = [
    {"customerClient": {"id": "1112223333", "descriptiveName": "Acme Shoes", "currencyCode": "EUR",
                        "timeZone": "Europe/Sofia", "status": "ENABLED", "manager": False,
                        "testAccount": True}},
    {"customerClient": {"id": "4445556666"}},
]


class TestFormatAccount:
    def test_camel_case_fields(self):
        assert format_account(CLIENT_ROWS[0]) == {
            "id": "1112223333",
            "name": "Acme Shoes",
            "currency_code": "EUR",
            "time_zone": "Europe/Sofia",
            "status": "ENABLED",
            "is_manager": False,
            "is_test_account": True,
        }

    def test_defaults(self):
        account = format_account(CLIENT_ROWS[1])
        assert account["name"] == "Unnamed Account"
        assert account["status"] == "UNKNOWN"
        assert account["is_test_account"] is False

    def test_snake_case_row(self):
        row = {"customer_client": {"id": 7, "descriptive_name": "Legacy"}}
        assert format_account(row)["name"] == "Legacy"
        assert format_account(row)["id"] == "7"


class TestGetMccAccounts:
    def test_requires_refresh_token(self, api):
        response = get_mcc_accounts({}, api)
        assert response.status == 400
        assert response.body["message"] == "refresh_token is required"

    def test_requires_mcc_id(self):
        api = GoogleAdsApi.from_settings(GoogleAdsSettings())
        response = get_mcc_accounts({"refresh_token": "rt1"}, api)

        assert response.status == 400
        assert response.body["error"] == "Missing MCC ID"

    def test_uses_configured_manager(self, api):
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", return_value=CLIENT_ROWS) as execute:
            response = get_mcc_accounts({"refresh_token": "rt1"}, api)

        assert response.status == 200
        assert response.body["manager_account_id"] == "9998887777"
        assert response.body["count"] == 2
        execute.assert_called_once_with("9998887777", "at", CUSTOMER_CLIENTS_QUERY, "9998887777", "rt1")

    def test_manager_from_params_wins(self, api):
        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", return_value=[]) as execute:
            response = get_mcc_accounts({"refresh_token": "rt1", "manager_customer_id": "111-000-2222"}, api)

        assert response.body["manager_account_id"] == "1110002222"
        assert response.body["accounts"] == []
        assert execute.call_args.args[0] == "1110002222"

    def test_manager_metrics_error_message(self, api):
        details = {"error": {"code": 400, "message": "Metrics cannot be requested for a manager account. "
                                                     "To retrieve metrics, issue separate requests against "
                                                     "each client account under the manager account."}}
        failure = QueryFailed("Google Ads API error (400): request rejected", details=details, status_code=400)

        with patch.object(api.token_provider, "get_access_token", return_value="at"), \
                patch.object(api.executor, "execute", side_effect=failure):
            response = get_mcc_accounts({"refresh_token": "rt1"}, api)

        assert response.status == 400
        assert response.body["google_ads_error_type"] == "REQUESTED_METRICS_FOR_MANAGER"
        assert response.body["message"].startswith("Cannot query metrics for manager accounts.")


class TestGetMccAccountsOverHttp:
    def test_rest_camel_case_response(self, api):
        with patch.object(api.token_provider.session, "post", return_value=token_response("at")), \
                patch.object(api.executor.session, "post",
                             return_value=make_response(200, {"results": CLIENT_ROWS})):
            response = get_mcc_accounts({"refresh_token": "rt1"}, api)

        accounts = response.body["accounts"]
        assert [a["id"] for a in accounts] == ["1112223333", "4445556666"]
        assert accounts[0]["name"] == "Acme Shoes"
        assert accounts[0]["is_test_account"] is True
