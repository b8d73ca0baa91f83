# Common utilities
from .config_loader import GoogleAdsSettings, load_settings
from .error_logger import (
    extract_google_ads_error,
    log_and_respond,
    mask_token,
    sanitize_details,
)
from .log_config import setup_logging
