"""
Exceptions raised by the plugin analytics SDK.
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base class for all SDK errors."""


class ServerNotSetupError(AnalyticsError):
    """Raised when no secret key has been configured for this server."""

    def __init__(self, message: str = "Server has not been set up: no secret key is configured"):
        super().__init__(message)


class NotFoundError(AnalyticsError):
    """Raised when the requested resource does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ServerNotFoundError(NotFoundError):
    """Raised when the analytics service does not recognise this server (HTTP 404)."""

    def __init__(self, message: str = "Server not found"):
        super().__init__(message)


class SecretKeyNotFoundError(NotFoundError, ServerNotSetupError):
    """Raised by the write paths that report a missing secret key as 'not found'."""

    def __init__(self, message: str = "Secret key not found"):
        AnalyticsError.__init__(self, message)


class RateLimitError(AnalyticsError):
    """Raised on HTTP 429."""

    def __init__(self, message: str = "You are being rate limited."):
        super().__init__(message)


class ResponseError(AnalyticsError):
    """Raised when the service answers with an unexpected status code."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 service_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = service_message


class MalformedResponseError(ResponseError):
    """Raised when a successful response lacks the fields we need."""


class TransportError(AnalyticsError, IOError):
    """Raised when no response was received at all."""
