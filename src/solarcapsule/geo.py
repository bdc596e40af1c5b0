"""Geographic helpers for Solar Capsule."""

import math

EARTH_RADIUS_KM = 6371.0


class InvalidCoordinateError(ValueError):
    """Exception raised for coordinates outside the physically valid range."""

    pass


def normalize_longitude(longitude: float) -> float:
    """Wrap a longitude into [-180, 180)."""
    return ((longitude + 180) % 360 + 360) % 360 - 180


def validate_longitude(longitude: float) -> float:
    """Validate a bare longitude and wrap it into [-180, 180).

    Raises:
        InvalidCoordinateError: If the value is not a finite number.
    """
    try:
        longitude = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(f"Longitude must be a number, got {longitude!r}")
    if not math.isfinite(longitude):
        raise InvalidCoordinateError(f"Longitude must be finite, got {longitude}")
    return normalize_longitude(longitude)


def validate_coordinates(latitude: float, longitude: float) -> tuple[float, float]:
    """Validate a coordinate pair at the creation boundary.

    Longitude is wrapped into [-180, 180); latitude is never clamped.

    Args:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.

    Returns:
        (latitude, normalized longitude).

    Raises:
        InvalidCoordinateError: If either value is not a finite number or the
            latitude is outside [-90, 90].
    """
    try:
        latitude = float(latitude)
        longitude = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(
            f"Coordinates must be numbers, got ({latitude!r}, {longitude!r})"
        )

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinateError(
            f"Coordinates must be finite, got ({latitude}, {longitude})"
        )
    if not -90 <= latitude <= 90:
        raise InvalidCoordinateError(f"latitude must be between -90 and 90, got {latitude}")

    return latitude, normalize_longitude(longitude)


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def format_distance(km: float) -> str:
    """Format a distance like ``"8,234 km"``."""
    return f"{round(km):,} km"
