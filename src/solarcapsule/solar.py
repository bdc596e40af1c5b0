"""Solar clock module for Solar Capsule.

Converts a longitude and a UTC instant into local solar time and the discrete
solar zone used to match people who share the same time of day, and
approximates the sub-solar point for day/night shading.

Solar time here is mean solar time: UTC shifted by four minutes per degree of
longitude. The Equation of Time only enters :func:`subsolar_point`, which is
advisory and never used for matching.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Tuple

import numpy as np

from solarcapsule.geo import normalize_longitude

TOTAL_ZONES = 51
MINUTES_PER_DEGREE = 4.0
MINUTES_PER_DAY = 1440

# Fourier coefficients over the fractional-year angle (NOAA approximation).
# Row k-1 holds the (cos k*gamma, sin k*gamma) coefficients.
_EOT_CONSTANT = 0.000075
_EOT_TERMS = np.array([
    [0.001868, -0.032077],
    [-0.014615, -0.040849],
])
_EOT_SCALE = 229.18  # radians to minutes of time

_DECLINATION_CONSTANT = 0.006918
_DECLINATION_TERMS = np.array([
    [-0.399912, 0.070257],
    [-0.006758, 0.000907],
    [-0.002697, 0.00148],
])


def as_utc(at: datetime) -> datetime:
    """Return ``at`` as an aware UTC datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at.astimezone(timezone.utc)


def elapsed_since(start: datetime, now: datetime) -> timedelta:
    """Time from ``start`` to ``now``, clamped to zero on clock skew."""
    return max(timedelta(0), as_utc(now) - as_utc(start))


def solar_time(
    longitude: float,
    at: datetime,
    minutes_per_degree: float = MINUTES_PER_DEGREE,
) -> datetime:
    """Shift a UTC instant to the mean solar time at ``longitude``.

    The result is a UTC-labelled datetime whose calendar fields read as the
    local solar clock. Longitude is wrapped into [-180, 180) first, so the
    shift is never more than half a day.
    """
    offset = normalize_longitude(longitude) * minutes_per_degree
    return as_utc(at) + timedelta(minutes=offset)


def solar_minutes(
    longitude: float,
    at: datetime,
    minutes_per_degree: float = MINUTES_PER_DEGREE,
) -> float:
    """Mean solar time of day at ``longitude``, in minutes after midnight.

    Works on time-of-day fields only, so any finite longitude and any
    representable instant give a value in [0, 1440).
    """
    at = as_utc(at)
    offset = (longitude * minutes_per_degree) % MINUTES_PER_DAY
    utc_minutes = (
        at.hour * 60 + at.minute + (at.second + at.microsecond / 1e6) / 60
    )
    return (utc_minutes + offset) % MINUTES_PER_DAY


def zone_width(total_zones: int = TOTAL_ZONES) -> float:
    """Width of one solar zone in minutes."""
    return MINUTES_PER_DAY / total_zones


def zone_index(
    longitude: float,
    at: datetime,
    total_zones: int = TOTAL_ZONES,
    minutes_per_degree: float = MINUTES_PER_DEGREE,
) -> int:
    """Solar zone index of ``longitude`` at instant ``at``.

    Only the solar time of day matters, floored to whole minutes; the
    longitude offset is reduced modulo one day, so longitudes outside
    [-180, 180] wrap.

    Args:
        longitude: Longitude in decimal degrees, east positive.
        at: Instant to evaluate.
        total_zones: Number of zones the solar day is split into.
        minutes_per_degree: Minutes of solar time per degree of longitude.

    Returns:
        Zone index in ``[0, total_zones)``.
    """
    minutes = math.floor(solar_minutes(longitude, at, minutes_per_degree))
    return math.floor(minutes / zone_width(total_zones)) % total_zones


def zone_bounds(index: int, total_zones: int = TOTAL_ZONES) -> Tuple[float, float]:
    """Solar time-of-day span of a zone, as (start, end) minutes after midnight."""
    if not 0 <= index < total_zones:
        raise ValueError(f"zone index must be in [0, {total_zones}), got {index}")
    width = zone_width(total_zones)
    return index * width, (index + 1) * width


def format_minutes(minutes: float) -> str:
    """Format minutes after midnight as ``HH:MM``."""
    total = int(minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def _harmonic(gamma: float, constant: float, terms: np.ndarray) -> float:
    k = np.arange(1, len(terms) + 1)
    return float(
        constant
        + np.sum(terms[:, 0] * np.cos(k * gamma))
        + np.sum(terms[:, 1] * np.sin(k * gamma))
    )


def fractional_year(at: datetime) -> float:
    """Fractional year angle in radians used by the solar series."""
    at = as_utc(at)
    day_of_year = at.timetuple().tm_yday
    return (2 * math.pi / 365) * (day_of_year - 1 + (at.hour - 12) / 24)


def equation_of_time(at: datetime) -> float:
    """Equation of Time in minutes (apparent minus mean solar time)."""
    return _EOT_SCALE * _harmonic(fractional_year(at), _EOT_CONSTANT, _EOT_TERMS)


def solar_declination(at: datetime) -> float:
    """Solar declination in degrees."""
    declination = _harmonic(
        fractional_year(at), _DECLINATION_CONSTANT, _DECLINATION_TERMS
    )
    return math.degrees(declination)


def subsolar_point(at: datetime) -> Tuple[float, float]:
    """Approximate point on Earth where the sun is directly overhead.

    Args:
        at: Instant to evaluate.

    Returns:
        (longitude, latitude) in degrees, longitude in [-180, 180).
    """
    at = as_utc(at)
    utc_hours = at.hour + at.minute / 60 + at.second / 3600
    longitude = 180 - (utc_hours + equation_of_time(at) / 60) * 15
    return normalize_longitude(longitude), solar_declination(at)


def is_daylight(latitude: float, longitude: float, at: datetime) -> bool:
    """Whether the sun is above the horizon at a location (no refraction)."""
    sun_lon, sun_lat = subsolar_point(at)
    phi1, phi2 = math.radians(latitude), math.radians(sun_lat)
    dlon = math.radians(longitude - sun_lon)
    cos_angle = (
        math.sin(phi1) * math.sin(phi2)
        + math.cos(phi1) * math.cos(phi2) * math.cos(dlon)
    )
    return cos_angle > 0


# (label, start hour inclusive, end hour exclusive) on the local solar clock
_TIME_OF_DAY = (
    ("dawn", 5, 7),
    ("morning", 7, 12),
    ("noon", 12, 14),
    ("afternoon", 14, 17),
    ("dusk", 17, 19),
)


def time_of_day_label(longitude: float, at: datetime) -> str:
    """Coarse label for the local solar time, e.g. ``"dusk"``."""
    hours = solar_minutes(longitude, at) / 60
    for label, start, end in _TIME_OF_DAY:
        if start <= hours < end:
            return label
    return "night"
