"""
Error Logger

Centralized error logging and response formatting for the endpoints.
Tokens are masked before anything reaches the log or the response body.
"""

import copy
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_REFRESH_TOKEN_IN_TEXT = re.compile(r"refresh[_-]?token[=:]\s*['\"]?([^'\"\s&,]+)", re.IGNORECASE)

# Checked in order; first match wins
GOOGLE_ADS_ERROR_PATTERNS = {
    "REQUESTED_METRICS_FOR_MANAGER": re.compile(r"metrics.*cannot.*requested.*manager", re.IGNORECASE),
    "AUTHENTICATION_ERROR": re.compile(r"authentication|unauthorized|unauthenticated|invalid.*token", re.IGNORECASE),
    "PERMISSION_DENIED": re.compile(r"permission.*denied|forbidden", re.IGNORECASE),
    "INVALID_CUSTOMER_ID": re.compile(r"invalid.*customer|customer.*not.*found", re.IGNORECASE),
    "QUERY_ERROR": re.compile(r"query.*error|invalid.*query", re.IGNORECASE),
}


def mask_token(token: Any) -> str:
    """Show the first 8 and last 6 characters of a token, or *** if too short."""
    if not isinstance(token, str) or len(token) < 10:
        return "***"
    return f"{token[:8]}...{token[-6:]}"


def _mask_text(text: str) -> str:
    return _REFRESH_TOKEN_IN_TEXT.sub(
        lambda m: m.group(0).replace(m.group(1), mask_token(m.group(1))), text
    )


def _mask_in_place(obj: Any) -> None:
    if isinstance(obj, dict):
        for key, value in obj.items():
            if "token" in str(key).lower() and isinstance(value, str):
                obj[key] = mask_token(value)
            elif isinstance(value, str):
                obj[key] = _mask_text(value)
            else:
                _mask_in_place(value)
    elif isinstance(obj, list):
        for i, value in enumerate(obj):
            if isinstance(value, str):
                obj[i] = _mask_text(value)
            else:
                _mask_in_place(value)


def sanitize_details(details: Any) -> Any:
    """
    Return a copy of error details with credentials masked.

    Strings have `refresh_token=...` style fragments masked; mappings have
    every string value under a key containing "token" masked, recursively.
    """
    if isinstance(details, str):
        return _mask_text(details)
    if isinstance(details, (dict, list)):
        sanitized = copy.deepcopy(details)
        _mask_in_place(sanitized)
        return sanitized
    return details


def _error_message(error: Any) -> str:
    message = getattr(error, "message", None)
    if message:
        return str(message)
    if isinstance(error, BaseException) and str(error):
        return str(error)
    if isinstance(error, dict):
        inner = error.get("error") if isinstance(error.get("error"), dict) else {}
        return error.get("message") or inner.get("message") or "Unknown error"
    return "Unknown error"


def _error_details(error: Any) -> Any:
    details = getattr(error, "details", None)
    if details is not None:
        return details
    if isinstance(error, dict):
        inner = error.get("error") if isinstance(error.get("error"), dict) else {}
        return error.get("details") or inner.get("details") or error
    return None


def extract_google_ads_error(error: Any) -> Optional[Dict[str, str]]:
    """
    Classify an error against known Google Ads API failure patterns.

    Returns:
        {"type": ..., "message": ...} or None when nothing matches
    """
    message = _error_message(error)
    try:
        details_text = json.dumps(_error_details(error), default=str)
    except (TypeError, ValueError):
        details_text = str(_error_details(error))

    for error_type, pattern in GOOGLE_ADS_ERROR_PATTERNS.items():
        if pattern.search(message) or pattern.search(details_text):
            return {"type": error_type, "message": message or "Google Ads API error"}
    return None


def log_and_respond(error: Any, context: str = "", **additional: Any) -> Dict[str, Any]:
    """
    Log an error with context and build the standard error response body.

    Args:
        error: Exception or error-like dict
        context: Where the error happened (e.g. "GET /api/campaigns")
        **additional: Extra fields for the log record

    Returns:
        {"success": False, "context", "message", "details", "timestamp"}
    """
    message = _error_message(error)
    details = sanitize_details(_error_details(error))
    timestamp = datetime.now(timezone.utc).isoformat()

    logger.error(
        "[%s] %s | details=%s",
        context or "Unknown",
        message,
        details,
        exc_info=error if isinstance(error, BaseException) else None,
        extra={"context": context, "error_details": details, **additional},
    )

    return {
        "success": False,
        "context": context or "Unknown",
        "message": message,
        "details": details,
        "timestamp": timestamp,
    }
