"""
Google Ads REST Proxy

Modules:
    common      - Shared utilities (settings loader, logging, error logger)
    google_ads  - OAuth token cache, GAQL query executor, response normalizer
    endpoints   - Request/response mapping for the proxy endpoints
"""
