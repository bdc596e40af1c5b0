"""Demo data for Solar Capsule.

Scatters capsules around a ring of cities so a fresh store has something to
show in every part of the solar day.
"""

from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from solarcapsule.lifecycle import CapsuleService
from solarcapsule.logger import get_logger
from solarcapsule.models import Capsule

logger = get_logger(__name__)

DEMO_AUTHOR_ID = 0

DEMO_TEXTS = (
    "Sometimes I wonder if anyone else is looking at the same stars...",
    "Today's sunset was breathtaking. Wish I could share it with someone.",
    "Feeling grateful for the small moments of peace in this chaotic world.",
    "Just had the best coffee of my life at a tiny cafe nobody knows about.",
    "Missing home, but loving this journey.",
    "The ocean always reminds me how small we are.",
    "Late night thoughts: what if we're all just trying to find our way home?",
    "The city lights look like stars from up here.",
    "Sending good vibes to whoever needs them right now.",
    "The smell of rain on warm pavement is my favorite thing.",
    "Hope you're doing okay, wherever you are.",
    "Midnight snack: instant noodles and existential thoughts.",
    "If you're reading this, you're not alone.",
    "星空下的我，想知道你在哪里。",
    "今晚的月亮特别圆，你看到了吗？",
)

# (latitude, longitude), roughly one per hour of longitude
DEMO_CITIES = (
    (51.5074, -0.1278),  # London
    (48.8566, 2.3522),  # Paris
    (41.9028, 12.4964),  # Rome
    (55.7558, 37.6173),  # Moscow
    (25.2048, 55.2708),  # Dubai
    (28.6139, 77.2090),  # New Delhi
    (23.8103, 90.4125),  # Dhaka
    (13.7563, 100.5018),  # Bangkok
    (39.9042, 116.4074),  # Beijing
    (35.6762, 139.6503),  # Tokyo
    (-33.8688, 151.2093),  # Sydney
    (-41.2865, 174.7762),  # Wellington
    (-17.8252, -149.5250),  # Tahiti
    (21.3099, -157.8581),  # Honolulu
    (61.2181, -149.9003),  # Anchorage
    (37.7749, -122.4194),  # San Francisco
    (19.4326, -99.1332),  # Mexico City
    (-12.0464, -77.0428),  # Lima
    (40.7128, -74.0060),  # New York
    (-23.5505, -46.6333),  # Sao Paulo
    (-34.6037, -58.3816),  # Buenos Aires
    (-15.7942, -47.8822),  # Brasilia
    (64.1466, -21.9426),  # Reykjavik
    (27.9117, -15.4362),  # Gran Canaria
)

JITTER_DEGREES = 10.0


def seed_capsules(
    service: CapsuleService,
    now: datetime,
    per_city: int = 3,
    author_id: int = DEMO_AUTHOR_ID,
    seed: Optional[int] = None,
) -> List[Capsule]:
    """Drop demo capsules around every demo city.

    Each capsule is jittered up to half of ``JITTER_DEGREES`` from its city
    and back-dated by up to one lifetime minus an hour, so all of them are
    still live at ``now``. Zones come from the back-dated creation instant,
    exactly as for a real drop.

    Args:
        service: Service to create capsules through.
        now: Instant the demo is seeded at.
        per_city: Capsules per city.
        author_id: Author of the demo capsules.
        seed: Seed for the random generator, for reproducible demos.

    Returns:
        The created capsules.
    """
    if per_city < 0:
        raise ValueError(f"per_city must be non-negative, got {per_city}")

    rng = np.random.default_rng(seed)
    lifetime_hours = service.config.disclosure.lifetime_days * 24

    capsules = []
    for latitude, longitude in DEMO_CITIES:
        for _ in range(per_city):
            dlat, dlon = (rng.random(2) - 0.5) * JITTER_DEGREES
            hours_ago = int(rng.integers(0, lifetime_hours))
            text = DEMO_TEXTS[int(rng.integers(len(DEMO_TEXTS)))]
            capsules.append(
                service.create_capsule(
                    author_id,
                    text,
                    min(90.0, max(-90.0, latitude + float(dlat))),
                    longitude + float(dlon),
                    now - timedelta(hours=hours_ago),
                )
            )

    logger.info(f"Seeded {len(capsules)} demo capsule(s) for user {author_id}")
    return capsules
