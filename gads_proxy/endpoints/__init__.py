"""
Proxy endpoint handlers.

Modules:
    base            - EndpointResponse, parameter helpers, error mapping
    campaigns       - GET /api/campaigns
    ad_groups       - GET /api/adgroups
    mcc_accounts    - GET /api/mcc-accounts
    ads_metrics     - GET /api/ads-metrics
    sandbox_account - POST /api/create-test-account
"""

from .ad_groups import get_ad_groups
from .ads_metrics import get_ads_metrics
from .base import EndpointResponse
from .campaigns import get_campaigns
from .mcc_accounts import get_mcc_accounts
from .sandbox_account import create_test_account

# Route path -> handler, for hosts that dispatch by path
ROUTES = {
    "/api/campaigns": get_campaigns,
    "/api/adgroups": get_ad_groups,
    "/api/mcc-accounts": get_mcc_accounts,
    "/api/ads-metrics": get_ads_metrics,
    "/api/create-test-account": create_test_account,
}

__all__ = [
    'EndpointResponse',
    'ROUTES',
    'create_test_account',
    'get_ad_groups',
    'get_ads_metrics',
    'get_campaigns',
    'get_mcc_accounts',
]
