#!/usr/bin/env python3
"""
Google Ads proxy from the command line.

Runs one proxy endpoint (or a raw GAQL query) and prints the JSON response.
Credentials come from .env / environment variables (GADS_CLIENT_ID,
GADS_CLIENT_SECRET, GADS_DEVELOPER_TOKEN, GADS_MANAGER_ID, GADS_REFRESH_TOKEN)
and optionally a google-ads.yaml file.

Usage:
    # Campaigns for a customer
    python3 scripts/gads_query.py campaigns --customer-id 123-456-7890

    # Ad groups for one campaign, under an MCC
    python3 scripts/gads_query.py adgroups --customer-id 1234567890 \\
        --campaign-id 987654 --login-customer-id 111-222-3333

    # Client accounts under the configured MCC
    python3 scripts/gads_query.py mcc-accounts

    # Raw GAQL
    python3 scripts/gads_query.py query --customer-id 1234567890 \\
        --gaql "SELECT campaign.id, campaign.name FROM campaign"
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Add project root to path for proper package imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gads_proxy.common.config_loader import load_settings
from gads_proxy.common.error_logger import log_and_respond
from gads_proxy.common.log_config import setup_logging
from gads_proxy.endpoints import ROUTES
from gads_proxy.google_ads import GoogleAdsApi, GoogleAdsProxyError

logger = logging.getLogger(__name__)

# Subcommand -> endpoint route
COMMANDS = {
    "campaigns": "/api/campaigns",
    "adgroups": "/api/adgroups",
    "mcc-accounts": "/api/mcc-accounts",
    "ads-metrics": "/api/ads-metrics",
    "create-test-account": "/api/create-test-account",
}


def build_params(args: argparse.Namespace, refresh_token: str) -> dict:
    """Endpoint query parameters from CLI arguments."""
    params = {
        "refresh_token": refresh_token,
        "customer_id": args.customer_id,
        "login_customer_id": args.login_customer_id,
        "manager_customer_id": args.login_customer_id,
        "campaign_id": args.campaign_id,
        "name": args.name,
    }
    return {k: v for k, v in params.items() if v}


def run_query(api: GoogleAdsApi, args: argparse.Namespace, refresh_token: str) -> tuple:
    """Run raw GAQL; returns (exit_code, body)."""
    if not args.customer_id or not args.gaql:
        return 2, {"success": False, "message": "--customer-id and --gaql are required"}

    try:
        access_token = api.token_provider.get_access_token(refresh_token)
        rows = api.executor.execute(
            args.customer_id, access_token, args.gaql, args.login_customer_id, refresh_token
        )
    except GoogleAdsProxyError as e:
        return 1, log_and_respond(e, "gads_query query")

    return 0, {"success": True, "count": len(rows), "results": rows}


def main() -> None:
    parser = argparse.ArgumentParser(description="Run Google Ads proxy endpoints from the command line")
    parser.add_argument("command", choices=sorted(COMMANDS) + ["query"], help="Endpoint to run")
    parser.add_argument("--customer-id", help="Google Ads customer ID (dashes allowed)")
    parser.add_argument("--login-customer-id", help="Manager (MCC) customer ID")
    parser.add_argument("--campaign-id", help="Restrict adgroups to one campaign")
    parser.add_argument("--name", help="Account name for create-test-account")
    parser.add_argument("--gaql", help="GAQL query for the 'query' command")
    parser.add_argument(
        "--refresh-token",
        help="OAuth refresh token (default: reads GADS_REFRESH_TOKEN env var)",
    )
    parser.add_argument("--config", help="Optional google-ads.yaml config file")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--quiet", action="store_true")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose, quiet=args.quiet)
    load_dotenv()

    settings = load_settings(args.config)
    refresh_token = args.refresh_token or settings.refresh_token
    if not refresh_token:
        print("ERROR: No refresh token. Use --refresh-token or set GADS_REFRESH_TOKEN.")
        sys.exit(1)

    api = GoogleAdsApi.from_settings(settings)
    try:
        if args.command == "query":
            exit_code, body = run_query(api, args, refresh_token)
        else:
            handler = ROUTES[COMMANDS[args.command]]
            response = handler(build_params(args, refresh_token), api)
            exit_code = 0 if response.status < 400 else 1
            body = response.body
    finally:
        api.close()

    print(json.dumps(body, indent=2, ensure_ascii=False))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
