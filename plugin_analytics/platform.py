"""
The host platform the SDK runs inside.

A game-server plugin subclasses :class:`Platform` to hand the client its
configuration, its telemetry and its log output. The defaults here are
enough for scripts and tests.
"""

import logging
import sys
from enum import Enum
from typing import Optional, Iterable, Any

from .config import SDK_VERSION

logger = logging.getLogger(__name__)


class PlatformType(Enum):
    """Server software the plugin is built for."""
    BUKKIT = "bukkit"
    BUNGEECORD = "bungeecord"
    VELOCITY = "velocity"
    FABRIC = "fabric"

    @property
    def asset_key(self) -> str:
        """Key of this platform's download in the ``assets`` object."""
        return self.name.lower()


class PlatformConfig:
    """Settings the host plugin loaded from its own config file."""

    def __init__(self, secret_key: Optional[str] = None, verbose: bool = False,
                 debug: bool = False, analytics_enabled: bool = True,
                 excluded_players: Optional[Iterable[str]] = None):
        self.secret_key = secret_key
        self.verbose = verbose
        self.debug = debug
        self.analytics_enabled = analytics_enabled
        self.excluded_players = {str(p).lower() for p in (excluded_players or ())}

    def is_player_excluded(self, unique_id: str) -> bool:
        return str(unique_id).lower() in self.excluded_players


class Platform:
    """Base collaborator consulted by :class:`AnalyticsClient`."""

    def __init__(self, config: Optional[PlatformConfig] = None,
                 platform_type: PlatformType = PlatformType.BUKKIT):
        self.config = config or PlatformConfig()
        self.platform_type = platform_type

    def get_platform_config(self) -> PlatformConfig:
        return self.config

    def get_type(self) -> PlatformType:
        return self.platform_type

    def is_analytics_setup(self) -> bool:
        """Analytics runs once a key is configured and it has not been turned off."""
        config = self.get_platform_config()
        return bool(config.secret_key) and config.analytics_enabled

    def is_player_excluded(self, unique_id: str) -> bool:
        return self.get_platform_config().is_player_excluded(unique_id)

    def get_server_software(self) -> str:
        return self.get_type().value

    def get_server_version(self) -> str:
        return "unknown"

    def get_telemetry(self) -> Any:
        """Describe this server. Hosts override the pieces they know."""
        from .models import ServerTelemetry

        return ServerTelemetry(
            sdk_version=SDK_VERSION,
            server_software=self.get_server_software(),
            server_version=self.get_server_version(),
            runtime_version=sys.version.split()[0]
        )

    def debug(self, message: str) -> None:
        if self.get_platform_config().debug:
            logger.info(f"[DEBUG] {message}")

    def warning(self, message: str) -> None:
        logger.warning(message)
