"""Record types for Solar Capsule.

Capsules and replies are written once and never mutated. Everything a reader
sees about them beyond these fields (zone membership of other people's
capsules, drifted position, reply unlock state) is derived at read time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from solarcapsule.solar import as_utc


def _format_instant(value: datetime) -> str:
    return as_utc(value).isoformat()


def _parse_instant(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value))


@dataclass(frozen=True)
class Capsule:
    """A geotagged, time-boxed message."""

    id: int
    author_id: int
    content_text: str
    latitude: float
    longitude: float
    solar_zone_index: int  # fixed at creation, never recomputed
    created_at: datetime
    expires_at: datetime
    image_ref: Optional[str] = None
    audio_ref: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        """Whether the capsule has reached its expiry at ``now``."""
        return as_utc(self.expires_at) <= as_utc(now)

    def to_dict(self) -> dict:
        """Convert capsule to dictionary for JSON export."""
        return {
            "id": self.id,
            "author_id": self.author_id,
            "content_text": self.content_text,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "solar_zone_index": self.solar_zone_index,
            "created_at": _format_instant(self.created_at),
            "expires_at": _format_instant(self.expires_at),
            "image_ref": self.image_ref,
            "audio_ref": self.audio_ref,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Capsule":
        """Create Capsule from dictionary."""
        return cls(
            id=int(data["id"]),
            author_id=int(data["author_id"]),
            content_text=data["content_text"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            solar_zone_index=int(data["solar_zone_index"]),
            created_at=_parse_instant(data["created_at"]),
            expires_at=_parse_instant(data["expires_at"]),
            image_ref=data.get("image_ref"),
            audio_ref=data.get("audio_ref"),
        )


@dataclass(frozen=True)
class Reply:
    """A response attached to exactly one capsule."""

    id: int
    capsule_id: int
    author_id: int
    content_text: str
    created_at: datetime

    def to_dict(self) -> dict:
        """Convert reply to dictionary for JSON export."""
        return {
            "id": self.id,
            "capsule_id": self.capsule_id,
            "author_id": self.author_id,
            "content_text": self.content_text,
            "created_at": _format_instant(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Reply":
        """Create Reply from dictionary."""
        return cls(
            id=int(data["id"]),
            capsule_id=int(data["capsule_id"]),
            author_id=int(data["author_id"]),
            content_text=data["content_text"],
            created_at=_parse_instant(data["created_at"]),
        )
