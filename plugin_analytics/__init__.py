"""
Plugin Analytics SDK

A Python SDK for reporting game-server analytics from a plugin.
"""

from .client import AnalyticsClient
from .config import SDK_VERSION
from .credentials import Credentials
from .events import Event, PlayerSession, PlayerType
from .exceptions import (
    AnalyticsError, MalformedResponseError, NotFoundError, RateLimitError, ResponseError,
    SecretKeyNotFoundError, ServerNotFoundError, ServerNotSetupError, TransportError
)
from .models import PluginInformation, ServerInformation, ServerTelemetry
from .platform import Platform, PlatformConfig, PlatformType

__version__ = SDK_VERSION

__all__ = [
    "AnalyticsClient",
    "Credentials",
    "Event",
    "PlayerSession",
    "PlayerType",
    "Platform",
    "PlatformConfig",
    "PlatformType",
    "PluginInformation",
    "ServerInformation",
    "ServerTelemetry",
    "AnalyticsError",
    "ServerNotSetupError",
    "NotFoundError",
    "ServerNotFoundError",
    "SecretKeyNotFoundError",
    "RateLimitError",
    "ResponseError",
    "MalformedResponseError",
    "TransportError"
]
