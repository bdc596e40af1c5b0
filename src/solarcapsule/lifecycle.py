"""Capsule lifecycle module for Solar Capsule.

This module ties the solar clock, drift model, zone matcher and disclosure
window to a capsule store. Creation writes immutable facts once; every read
recomputes zone membership, drifted position and unlock state from the
instant it is given.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from solarcapsule.config import Config
from solarcapsule.disclosure import InboxSummary, UnlockState, summarize_inbox, unlock_state
from solarcapsule.drift import drifted_longitude
from solarcapsule.geo import validate_coordinates
from solarcapsule.logger import get_logger
from solarcapsule.matching import owned_capsules, visible_capsules
from solarcapsule.models import Capsule, Reply
from solarcapsule.solar import as_utc, zone_index
from solarcapsule.storage import CapsuleNotFoundError, CapsuleStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class GlobePin:
    """A capsule placed on the globe at its current drifted position."""

    capsule: Capsule
    longitude: float
    reply_count: int

    @property
    def latitude(self) -> float:
        """Latitude of the pin (drift is purely longitudinal)."""
        return self.capsule.latitude

    def to_dict(self) -> dict:
        """Convert pin to dictionary for JSON export."""
        data = self.capsule.to_dict()
        data["drifted_longitude"] = self.longitude
        data["reply_count"] = self.reply_count
        return data


@dataclass(frozen=True)
class CapsuleDetail:
    """A single capsule with its replies as one viewer may see them."""

    capsule: Capsule
    longitude: float
    unlock: UnlockState

    def to_dict(self) -> dict:
        """Convert detail to dictionary for JSON export."""
        return {
            "capsule": self.capsule.to_dict(),
            "drifted_longitude": self.longitude,
            **self.unlock.to_dict(),
        }


class CapsuleService:
    """Creates capsules and replies and answers read-time queries."""

    def __init__(self, store: CapsuleStore, config: Optional[Config] = None):
        """Initialize the service.

        Args:
            store: Capsule store to read from and append to.
            config: System configuration. If None, uses defaults.
        """
        self.store = store
        self.config = config if config is not None else Config()

    def current_zone(self, longitude: float, now: datetime) -> int:
        """Solar zone a viewer at ``longitude`` is in at ``now``."""
        zoning = self.config.zoning
        return zone_index(
            longitude,
            now,
            total_zones=zoning.total_zones,
            minutes_per_degree=zoning.minutes_per_degree,
        )

    def _drift(self, capsule: Capsule, now: datetime) -> float:
        return drifted_longitude(
            capsule.longitude,
            capsule.created_at,
            now,
            degrees_per_hour=self.config.drift.degrees_per_hour,
        )

    def create_capsule(
        self,
        author_id: int,
        content_text: str,
        latitude: float,
        longitude: float,
        now: datetime,
        image_ref: Optional[str] = None,
        audio_ref: Optional[str] = None,
    ) -> Capsule:
        """Drop a new capsule.

        The solar zone is assigned here, once, from the origin longitude and
        the creation instant.

        Args:
            author_id: Id of the author.
            content_text: Message text.
            latitude: Origin latitude in degrees.
            longitude: Origin longitude in degrees; wrapped into [-180, 180).
            now: Creation instant.
            image_ref: Optional reference to an uploaded image.
            audio_ref: Optional reference to an uploaded audio clip.

        Returns:
            The stored capsule.

        Raises:
            InvalidCoordinateError: If the coordinates are not valid.
        """
        latitude, longitude = validate_coordinates(latitude, longitude)
        created_at = as_utc(now)
        lifetime = timedelta(days=self.config.disclosure.lifetime_days)

        capsule = self.store.create_capsule(
            {
                "author_id": author_id,
                "content_text": content_text,
                "latitude": latitude,
                "longitude": longitude,
                "solar_zone_index": self.current_zone(longitude, created_at),
                "created_at": created_at,
                "expires_at": created_at + lifetime,
                "image_ref": image_ref,
                "audio_ref": audio_ref,
            }
        )
        logger.info(
            f"Capsule {capsule.id} dropped by user {author_id} "
            f"at ({latitude:.4f}, {longitude:.4f}) in zone {capsule.solar_zone_index}"
        )
        return capsule

    def _require_capsule(self, capsule_id: int) -> Capsule:
        capsule = self.store.get_capsule(capsule_id)
        if capsule is None:
            raise CapsuleNotFoundError(f"Capsule not found: {capsule_id}")
        return capsule

    def create_reply(
        self, capsule_id: int, author_id: int, content_text: str, now: datetime
    ) -> Reply:
        """Reply to an existing capsule.

        Raises:
            CapsuleNotFoundError: If the capsule does not exist.
        """
        self._require_capsule(capsule_id)
        reply = self.store.create_reply(
            {
                "capsule_id": capsule_id,
                "author_id": author_id,
                "content_text": content_text,
                "created_at": as_utc(now),
            }
        )
        logger.info(f"Reply {reply.id} to capsule {capsule_id} by user {author_id}")
        return reply

    def globe_view(
        self, zone: int, viewer_id: Optional[int], now: datetime
    ) -> List[GlobePin]:
        """Capsules to draw on the globe for a viewer in ``zone``, newest first."""
        capsules = self.store.find_capsules(visible_capsules(zone, viewer_id, now))
        pins = [
            GlobePin(
                capsule=capsule,
                longitude=self._drift(capsule, now),
                reply_count=self.store.count_replies(capsule.id),
            )
            for capsule in capsules
        ]
        logger.debug(f"Globe view for zone {zone}: {len(pins)} capsule(s)")
        return pins

    def capsule_detail(
        self, capsule_id: int, viewer_id: Optional[int], now: datetime
    ) -> CapsuleDetail:
        """A capsule and the replies ``viewer_id`` may read at ``now``.

        A missing ``viewer_id`` is treated as a visitor who is not the author.

        Raises:
            CapsuleNotFoundError: If the capsule does not exist.
        """
        capsule = self._require_capsule(capsule_id)
        disclosure = self.config.disclosure
        state = unlock_state(
            capsule.created_at,
            self.store.find_replies(capsule_id),
            now,
            is_author=viewer_id is not None and viewer_id == capsule.author_id,
            band_hours=disclosure.band_hours,
            lifetime_days=disclosure.lifetime_days,
        )
        return CapsuleDetail(
            capsule=capsule,
            longitude=self._drift(capsule, now),
            unlock=state,
        )

    def inbox(self, viewer_id: Optional[int], now: datetime) -> InboxSummary:
        """Reply summary across the viewer's live capsules.

        Without a viewer there is no author to summarize for, so the inbox is
        empty.
        """
        if viewer_id is None:
            logger.debug("Inbox requested without a viewer, returning empty inbox")
            return InboxSummary(items=(), total_unread=0)

        capsules = self.store.find_capsules(owned_capsules(viewer_id, now))
        disclosure = self.config.disclosure
        return summarize_inbox(
            ((capsule, self.store.find_replies(capsule.id)) for capsule in capsules),
            now,
            band_hours=disclosure.band_hours,
            preview_length=disclosure.preview_length,
        )
