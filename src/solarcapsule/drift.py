"""Longitude drift module for Solar Capsule.

A capsule's displayed position rides the planet's rotation away from the sun
that fixed it: it moves westward at a constant rate for as long as it lives.

The drifted longitude is presentational only. A capsule's solar zone is
assigned once at creation and is never recomputed from the drifted value;
doing so would silently change matching results as capsules age.
"""

from datetime import datetime, timedelta

from solarcapsule.geo import normalize_longitude
from solarcapsule.solar import elapsed_since

DEGREES_PER_HOUR = 15.0


def drifted_longitude(
    origin_longitude: float,
    created_at: datetime,
    now: datetime,
    degrees_per_hour: float = DEGREES_PER_HOUR,
) -> float:
    """Effective display longitude of a capsule at ``now``.

    Args:
        origin_longitude: Longitude the capsule was dropped at.
        created_at: Creation instant of the capsule.
        now: Instant of the query.
        degrees_per_hour: Westward drift rate.

    Returns:
        Longitude in [-180, 180).
    """
    hours = elapsed_since(created_at, now) / timedelta(hours=1)
    return normalize_longitude(origin_longitude - hours * degrees_per_hour)
