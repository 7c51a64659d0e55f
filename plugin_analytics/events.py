"""
Payloads built by the host plugin and sent to the analytics service.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are read as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class PlayerType(str, Enum):
    """How the player connected to the server."""
    JAVA = "java"
    BEDROCK = "bedrock"


class PlayerSession:
    """A single play session, from join to logout."""

    def __init__(self, unique_id: str, name: str, ip_address: str,
                 player_type: PlayerType = PlayerType.JAVA,
                 joined_at: Optional[datetime] = None,
                 first_joined_at: Optional[datetime] = None,
                 country_code: Optional[str] = None):
        if not unique_id:
            raise ValueError("unique_id is required")

        self.unique_id = unique_id
        self.name = name
        self.ip_address = ip_address
        self.type = PlayerType(player_type)
        self.joined_at = _as_utc(joined_at) or _utcnow()
        self.first_joined_at = _as_utc(first_joined_at) or self.joined_at
        self.country_code = country_code
        self.left_at: Optional[datetime] = None

    def logout(self) -> None:
        """Stamp the leave time. Later calls keep the first value."""
        if self.left_at is None:
            self.left_at = _utcnow()

    @property
    def duration_in_seconds(self) -> int:
        end = _as_utc(self.left_at) or _utcnow()
        return max(0, int((end - _as_utc(self.joined_at)).total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to the JSON shape the service expects."""
        return {
            'uuid': self.unique_id,
            'username': self.name,
            'type': self.type.value,
            'ip_address': self.ip_address,
            'country_code': self.country_code,
            'joined_at': _isoformat(self.joined_at),
            'left_at': _isoformat(self.left_at),
            'first_joined_at': _isoformat(self.first_joined_at),
            'duration': self.duration_in_seconds
        }


class Event:
    """A trackable action, sent to the service in batches."""

    def __init__(self, name: str, domain: str, player: Optional[str] = None,
                 metadata: Optional[Dict[str, Any]] = None,
                 triggered_at: Optional[datetime] = None):
        if not name:
            raise ValueError("name is required")
        if not domain:
            raise ValueError("domain is required")

        self.name = name
        self.domain = domain
        self.player = player
        self.metadata = dict(metadata or {})
        self.triggered_at = _as_utc(triggered_at) or _utcnow()

    def with_metadata(self, key: str, value: Any) -> "Event":
        self.metadata[key] = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'domain': self.domain,
            'player': self.player,
            'metadata': self.metadata,
            'triggered_at': _isoformat(self.triggered_at)
        }
