"""
Configuration Loader

Loads Google Ads credentials and API settings from an optional YAML file
(same keys as the client library's google-ads.yaml) and the environment.
Environment variables win over the file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .constants import (
    DEFAULT_REQUEST_TIMEOUT,
    GOOGLE_ADS_API_BASE_URL,
    GOOGLE_ADS_API_VERSION,
    OAUTH_TOKEN_URL,
    SEARCH_MODE_SEARCH,
    SEARCH_MODES,
)

logger = logging.getLogger(__name__)

# Setting name -> environment variables, first match wins
ENV_VARIABLES: Dict[str, tuple] = {
    "client_id": ("GADS_CLIENT_ID", "CLIENT_ID"),
    "client_secret": ("GADS_CLIENT_SECRET", "CLIENT_SECRET"),
    "developer_token": ("GADS_DEVELOPER_TOKEN", "DEVELOPER_TOKEN"),
    "refresh_token": ("GADS_REFRESH_TOKEN", "REFRESH_TOKEN"),
    "manager_id": ("GADS_MANAGER_ID", "MANAGER_CUSTOMER_ID"),
    "api_version": ("GADS_API_VERSION",),
    "search_mode": ("GADS_SEARCH_MODE",),
}

# google-ads.yaml key -> setting name
YAML_KEYS: Dict[str, str] = {
    "client_id": "client_id",
    "client_secret": "client_secret",
    "developer_token": "developer_token",
    "refresh_token": "refresh_token",
    "login_customer_id": "manager_id",
    "manager_id": "manager_id",
    "api_version": "api_version",
    "search_mode": "search_mode",
    "request_timeout": "request_timeout",
}


@dataclass(frozen=True)
class GoogleAdsSettings:
    """Credentials and endpoint settings shared by the token provider and executor."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    developer_token: Optional[str] = None
    refresh_token: Optional[str] = None     # fallback when the caller passes none
    manager_id: Optional[str] = None        # default login-customer-id (MCC)
    api_version: str = GOOGLE_ADS_API_VERSION
    search_mode: str = SEARCH_MODE_SEARCH
    token_url: str = OAUTH_TOKEN_URL
    api_base_url: str = GOOGLE_ADS_API_BASE_URL
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if self.search_mode not in SEARCH_MODES:
            raise ValueError(
                f"Unsupported search_mode: {self.search_mode!r} "
                f"(expected one of {sorted(SEARCH_MODES)})"
            )


def _is_set(value: Any) -> bool:
    """Treat empty values and google-ads.yaml INSERT_ placeholders as unset."""
    return value is not None and str(value).strip() != "" and "INSERT_" not in str(value)


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GoogleAdsSettings:
    """
    Build settings from a YAML file and environment variables.

    Args:
        config_path: Optional path to a google-ads.yaml style file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        GoogleAdsSettings with environment values taking precedence

    Raises:
        FileNotFoundError: If config_path is given but doesn't exist
        ValueError: If search_mode is not a known endpoint
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Any] = {}

    if config_path:
        raw = _read_yaml(Path(config_path))
        for key, setting in YAML_KEYS.items():
            if _is_set(raw.get(key)):
                values[setting] = raw[key]
        logger.debug("Loaded %d settings from %s", len(values), config_path)

    for setting, names in ENV_VARIABLES.items():
        for name in names:
            if _is_set(environ.get(name)):
                values[setting] = environ[name]
                break

    # YAML may hold the MCC ID as an int
    if "manager_id" in values:
        values["manager_id"] = str(values["manager_id"])
    if "request_timeout" in values:
        values["request_timeout"] = int(values["request_timeout"])

    return GoogleAdsSettings(**values)
