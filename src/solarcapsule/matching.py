"""Capsule discovery filters for Solar Capsule.

A viewer discovers the non-expired capsules that were dropped in the solar
zone the viewer is in right now. Authors also always see their own capsules,
whichever zone those were dropped in.

Filters are plain value objects: a storage backend may evaluate them in
Python via ``matches`` or translate their fields into its own query.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from solarcapsule.models import Capsule
from solarcapsule.solar import as_utc


@dataclass(frozen=True)
class ZoneFilter:
    """Capsules visible from a solar zone, plus the viewer's own."""

    zone_index: int
    now: datetime
    viewer_id: Optional[int] = None

    def matches(self, capsule: Capsule) -> bool:
        """Whether ``capsule`` is visible under this filter."""
        if capsule.is_expired(self.now):
            return False
        if capsule.solar_zone_index == self.zone_index:
            return True
        return self.viewer_id is not None and capsule.author_id == self.viewer_id

    __call__ = matches


@dataclass(frozen=True)
class OwnerFilter:
    """Non-expired capsules written by one author."""

    author_id: int
    now: datetime

    def matches(self, capsule: Capsule) -> bool:
        """Whether ``capsule`` is visible under this filter."""
        return capsule.author_id == self.author_id and not capsule.is_expired(self.now)

    __call__ = matches


def visible_capsules(
    zone_index: int, viewer_id: Optional[int], now: datetime
) -> ZoneFilter:
    """Build the discovery filter for a viewer currently in ``zone_index``."""
    return ZoneFilter(zone_index=zone_index, now=as_utc(now), viewer_id=viewer_id)


def owned_capsules(author_id: int, now: datetime) -> OwnerFilter:
    """Build the filter for an author's live capsules."""
    return OwnerFilter(author_id=author_id, now=as_utc(now))


def order_newest(capsules: Iterable[Capsule]) -> List[Capsule]:
    """Sort capsules newest first."""
    return sorted(capsules, key=lambda c: as_utc(c.created_at), reverse=True)
