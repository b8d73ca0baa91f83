"""
Endpoint plumbing shared by the proxy handlers.

Handlers take the request's query parameters and the shared GoogleAdsApi
and return an EndpointResponse; the hosting framework relays status and body.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from ..common.error_logger import extract_google_ads_error, log_and_respond
from ..google_ads.errors import GoogleAdsProxyError, InvalidArgument, MissingCredential


# Errors caused by the caller's input rather than the provider
_CLIENT_ERRORS = (InvalidArgument, MissingCredential)


@dataclass
class EndpointResponse:
    """HTTP status and JSON-serializable body."""
    status: int
    body: Dict[str, Any]


def missing_parameters(message: str, error: str = "Missing required parameters") -> EndpointResponse:
    return EndpointResponse(400, {"success": False, "error": error, "message": message})


def param(params: Mapping[str, Any], name: str) -> Optional[str]:
    """Query parameter value, or None when absent or blank."""
    value = params.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def error_response(
    err: GoogleAdsProxyError,
    context: str,
    on_google_ads_error: Optional[Callable[[str, Dict[str, Any]], None]] = None,
) -> EndpointResponse:
    """
    Log an error and map it to a response.

    Known Google Ads error patterns and caller errors -> 400, the rest -> 500.
    `on_google_ads_error(type, body)` may adjust the body for a classified error.
    """
    google_ads_error = extract_google_ads_error(err)
    if google_ads_error:
        body = log_and_respond(err, context, google_ads_error_type=google_ads_error["type"])
        body["google_ads_error_type"] = google_ads_error["type"]
        if on_google_ads_error:
            on_google_ads_error(google_ads_error["type"], body)
        return EndpointResponse(400, body)

    body = log_and_respond(err, context)
    return EndpointResponse(400 if isinstance(err, _CLIENT_ERRORS) else 500, body)


def endpoint(context: str, on_google_ads_error: Optional[Callable[[str, Dict[str, Any]], None]] = None):
    """Decorator turning GoogleAdsProxyError into a logged error response."""

    def decorator(handler):
        @functools.wraps(handler)
        def wrapper(*args, **kwargs) -> EndpointResponse:
            try:
                return handler(*args, **kwargs)
            except GoogleAdsProxyError as err:
                return error_response(err, context, on_google_ads_error)

        wrapper.context = context
        return wrapper

    return decorator


def to_int(value: Any) -> int:
    """int64 metric (REST sends them as strings), 0 when absent or unparseable."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0
