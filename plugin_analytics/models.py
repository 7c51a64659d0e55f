"""
Pydantic models for analytics service responses and telemetry.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import MalformedResponseError
from .platform import PlatformType


class PluginInformation(BaseModel):
    """Latest published plugin build."""
    name: str
    incremental: int
    asset_url: str

    @classmethod
    def from_response(cls, body: Dict[str, Any], platform_type: PlatformType) -> "PluginInformation":
        """Build from a GET /plugin body, picking the asset for ``platform_type``."""
        try:
            version_data = body["version"]
            asset_data = body["assets"]
            return cls(
                name=version_data["name"],
                incremental=version_data["incremental"],
                asset_url=asset_data[platform_type.asset_key]
            )
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Malformed plugin information response: missing {e}") from e
        except ValidationError as e:
            raise MalformedResponseError(f"Malformed plugin information response: {e}") from e


class ServerInformation(BaseModel):
    """Server metadata held by the analytics service."""
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    setup_completed: Optional[bool] = None


class ServerTelemetry(BaseModel):
    """Operational details about the host server and plugin."""
    sdk_version: str
    plugin_version: Optional[str] = None
    server_software: str
    server_version: str
    runtime_version: Optional[str] = None
    online_mode: bool = True
    extra: Dict[str, Any] = Field(default_factory=dict)
