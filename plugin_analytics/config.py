"""
Environment-driven settings for the analytics client.
"""

import os
import logging
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

API_VERSION = 1
DEFAULT_BASE_URL = f"https://analytics.tebex.io/api/v{API_VERSION}"

BASE_URL_ENV = "ANALYTICS_API_URL"
INSECURE_TEST_HOSTS_ENV = "ANALYTICS_INSECURE_TEST_HOSTS"

SDK_VERSION = "1.0.0"

SECRET_KEY_HEADER = "X-Secret-Key"
USER_AGENT = "Tebex-SDK"


def get_base_url_override() -> Optional[str]:
    """Return the base URL set in the environment, if any."""
    return os.getenv(BASE_URL_ENV) or None


def resolve_base_url(base_url: Optional[str] = None) -> str:
    """Pick the explicit URL, then the environment override, then the default."""
    url = base_url or get_base_url_override() or DEFAULT_BASE_URL
    return url.rstrip('/')


def insecure_test_hosts_enabled() -> bool:
    return os.getenv(INSECURE_TEST_HOSTS_ENV, "false").lower() == "true"


def is_test_host(url: str) -> bool:
    """True when the URL points at a local ``.test`` hostname."""
    hostname = urlparse(url).hostname or ""
    return hostname == "test" or hostname.endswith(".test")


def should_verify_tls(url: str, insecure_test_hosts: Optional[bool] = None) -> bool:
    """Certificate checks are skipped only for test hosts with the flag turned on."""
    if insecure_test_hosts is None:
        insecure_test_hosts = insecure_test_hosts_enabled()

    if insecure_test_hosts and is_test_host(url):
        logger.warning(f"TLS verification disabled for test host {url}")
        return False
    return True
