"""Tests for solar clock module."""

from datetime import datetime, timedelta, timezone

import pytest

from solarcapsule.geo import normalize_longitude
from solarcapsule.solar import (
    TOTAL_ZONES,
    elapsed_since,
    equation_of_time,
    format_minutes,
    is_daylight,
    solar_minutes,
    solar_time,
    subsolar_point,
    time_of_day_label,
    zone_bounds,
    zone_index,
    zone_width,
)


def utc(*args) -> datetime:
    """Build an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


class TestSolarTime:
    """Tests for solar_time."""

    def test_greenwich_matches_utc(self):
        """Test that longitude 0 has no offset."""
        at = utc(2024, 3, 15, 10, 20, 17)
        assert solar_time(0, at) == at

    def test_four_minutes_per_degree(self):
        """Test the longitude offset."""
        at = utc(2024, 3, 15, 12, 0)
        assert solar_time(15, at) == utc(2024, 3, 15, 13, 0)
        assert solar_time(-30, at) == utc(2024, 3, 15, 10, 0)

    def test_crosses_calendar_day(self):
        """Test that the shifted instant may land on another day."""
        at = utc(2024, 3, 15, 23, 0)
        assert solar_time(30, at) == utc(2024, 3, 16, 1, 0)

    def test_naive_is_read_as_utc(self):
        """Test that naive datetimes are treated as UTC."""
        naive = datetime(2024, 3, 15, 12, 0)
        assert solar_time(45, naive) == solar_time(45, utc(2024, 3, 15, 12, 0))

    def test_huge_longitude_does_not_overflow(self):
        """Test that the shift is taken from the wrapped longitude."""
        # 1e9 degrees wraps to 80 W
        at = utc(2024, 3, 15, 12, 0)
        assert solar_time(1e9, at) == utc(2024, 3, 15, 6, 40)

    def test_other_timezone_converted(self):
        """Test that aware non-UTC datetimes are converted first."""
        tokyo = timezone(timedelta(hours=9))
        at = datetime(2024, 3, 15, 21, 0, tzinfo=tokyo)
        assert solar_time(0, at) == utc(2024, 3, 15, 12, 0)


class TestElapsedSince:
    """Tests for elapsed_since."""

    def test_elapsed(self):
        """Test a plain interval."""
        assert elapsed_since(utc(2024, 3, 15, 0, 0), utc(2024, 3, 16, 6, 0)) == timedelta(hours=30)

    def test_clock_skew_clamped(self):
        """Test that an end before the start gives zero."""
        assert elapsed_since(utc(2024, 3, 15, 6, 0), utc(2024, 3, 15, 0, 0)) == timedelta(0)

    def test_mixed_naive_and_aware(self):
        """Test that naive and aware instants can be compared."""
        assert elapsed_since(datetime(2024, 3, 15, 0, 0), utc(2024, 3, 15, 1, 0)) == timedelta(hours=1)


class TestSolarMinutes:
    """Tests for solar_minutes."""

    def test_greenwich(self):
        """Test that longitude 0 reads the UTC clock."""
        assert solar_minutes(0, utc(2024, 3, 15, 10, 20, 30)) == pytest.approx(620.5)

    def test_wraps_past_midnight(self):
        """Test that the result stays within one day."""
        assert solar_minutes(30, utc(2024, 3, 15, 23, 0)) == pytest.approx(60)
        assert solar_minutes(-30, utc(2024, 3, 15, 1, 0)) == pytest.approx(1380)

    @pytest.mark.parametrize("longitude", [1e9, -1e9, 3e9, -4e8, 540.0, -725.5])
    def test_always_in_range(self, longitude):
        """Test the range for out-of-range longitudes."""
        assert 0 <= solar_minutes(longitude, utc(2024, 3, 15, 10, 20, 17)) < 1440


class TestZoneIndex:
    """Tests for zone_index."""

    def test_zone_width(self):
        """Test the default zone width."""
        assert zone_width() == pytest.approx(1440 / 51)
        assert zone_width() == pytest.approx(28.235, abs=1e-3)

    def test_midnight_is_zone_zero(self):
        """Test solar midnight at Greenwich."""
        assert zone_index(0, utc(2024, 1, 1, 0, 0)) == 0

    def test_noon_at_greenwich(self):
        """Test solar noon at Greenwich."""
        # 720 / 28.235 = 25.5
        assert zone_index(0, utc(2024, 1, 1, 12, 0)) == 25

    def test_beijing(self):
        """Test Beijing at UTC midnight (solar 07:45)."""
        # 465 / 28.235 = 16.47
        assert zone_index(116.4, utc(2024, 6, 1, 0, 0)) == 16

    def test_last_minute_of_day(self):
        """Test that 23:59 solar time is in the last zone."""
        assert zone_index(0, utc(2024, 1, 1, 23, 59)) == TOTAL_ZONES - 1

    @pytest.mark.parametrize("longitude", [116.4, -73.9, 0.5, 179.99, 13.37, -180.0])
    def test_longitude_periodicity(self, longitude):
        """Test that shifting longitude by a full turn keeps the zone."""
        for at in (
            utc(2024, 3, 15, 10, 20, 17),
            utc(2024, 7, 1, 0, 3, 41),
            utc(2024, 12, 31, 23, 57, 9),
        ):
            expected = zone_index(longitude, at)
            assert zone_index(longitude + 360, at) == expected
            assert zone_index(longitude - 360, at) == expected

    def test_out_of_range_longitudes_are_valid(self):
        """Test that unnormalized longitudes still produce a valid zone."""
        at = utc(2024, 3, 15, 10, 20, 17)
        for longitude in (1000.0, -725.5, 540.0, -181.0):
            assert 0 <= zone_index(longitude, at) < TOTAL_ZONES

    @pytest.mark.parametrize("longitude", [1e9, -1e9, 3e9, -4e8])
    def test_huge_longitudes_wrap(self, longitude):
        """Test that far out-of-range longitudes match their wrapped value."""
        at = utc(2024, 3, 15, 10, 20, 17)
        assert zone_index(longitude, at) == zone_index(normalize_longitude(longitude), at)

    def test_huge_longitude_value(self):
        """Test the zone of a billion degrees east at 10:20 UTC."""
        # 4e9 minutes mod 1440 is 1120, so solar time is 05:00
        assert zone_index(1e9, utc(2024, 3, 15, 10, 20, 17)) == 10

    def test_first_and_last_representable_instants(self):
        """Test instants at the edges of the datetime range."""
        # 00:10 UTC at 30 W is 22:10 solar on the previous day
        assert zone_index(-30.0, utc(1, 1, 1, 0, 10)) == 47
        # 23:59:59 UTC at 30 E is 01:59 solar on the next day
        last = datetime.max.replace(tzinfo=timezone.utc)
        assert zone_index(30.0, last) == 4

    def test_monotonic_within_day(self):
        """Test that zones never decrease through a solar day."""
        start = utc(2024, 5, 5, 0, 0)
        zones = [zone_index(0, start + timedelta(minutes=m)) for m in range(1440)]
        assert zones[0] == 0
        assert zones[-1] == TOTAL_ZONES - 1
        assert all(a <= b for a, b in zip(zones, zones[1:]))
        assert set(zones) == set(range(TOTAL_ZONES))

    def test_ignores_calendar_day(self):
        """Test that the same solar time of day on different days matches."""
        assert zone_index(30, utc(2024, 1, 1, 22, 0)) == zone_index(30, utc(2024, 8, 9, 22, 0))

    def test_alternate_zone_count(self):
        """Test an injected zone count."""
        # 13:30 solar with 24 one-hour zones
        assert zone_index(0, utc(2024, 1, 1, 13, 30), total_zones=24) == 13

    def test_deterministic(self):
        """Test that repeated calls agree."""
        at = utc(2024, 3, 15, 10, 20, 17)
        assert zone_index(-122.4, at) == zone_index(-122.4, at)


class TestZoneBounds:
    """Tests for zone_bounds and format_minutes."""

    def test_first_zone(self):
        """Test the span of zone 0."""
        start, end = zone_bounds(0)
        assert start == 0
        assert end == pytest.approx(1440 / 51)

    def test_last_zone_ends_at_midnight(self):
        """Test that the last zone closes the day."""
        _, end = zone_bounds(TOTAL_ZONES - 1)
        assert end == pytest.approx(1440)

    def test_invalid_index(self):
        """Test that an out-of-range index raises."""
        with pytest.raises(ValueError, match="zone index must be in"):
            zone_bounds(TOTAL_ZONES)

    def test_format_minutes(self):
        """Test HH:MM formatting."""
        assert format_minutes(465.6) == "07:45"
        assert format_minutes(0) == "00:00"
        assert format_minutes(1440) == "00:00"


class TestSubsolarPoint:
    """Tests for subsolar_point and related helpers."""

    def test_march_equinox_noon(self):
        """Test the sun is near (0, 0) at the March equinox, 12:00 UTC."""
        longitude, latitude = subsolar_point(utc(2024, 3, 20, 12, 0))
        assert abs(latitude) < 1
        assert abs(longitude) < 3

    def test_june_solstice(self):
        """Test the sun is over the Tropic of Cancer in June."""
        _, latitude = subsolar_point(utc(2024, 6, 21, 12, 0))
        assert latitude == pytest.approx(23.44, abs=0.5)

    def test_december_solstice(self):
        """Test the sun is over the Tropic of Capricorn in December."""
        _, latitude = subsolar_point(utc(2024, 12, 21, 12, 0))
        assert latitude == pytest.approx(-23.44, abs=0.5)

    def test_midnight_near_antimeridian(self):
        """Test the sun is near the antimeridian at 00:00 UTC."""
        longitude, _ = subsolar_point(utc(2024, 3, 20, 0, 0))
        assert abs(abs(longitude) - 180) < 5

    def test_longitude_in_range(self):
        """Test that the longitude is normalized."""
        start = utc(2024, 1, 1, 0, 0)
        for hours in range(0, 24 * 365, 37):
            longitude, latitude = subsolar_point(start + timedelta(hours=hours))
            assert -180 <= longitude < 180
            assert -24 < latitude < 24

    def test_equation_of_time_extremes(self):
        """Test the Equation of Time stays within its known envelope."""
        # Early November peaks around +16 minutes, mid February around -14
        assert equation_of_time(utc(2024, 11, 3, 12, 0)) == pytest.approx(16.4, abs=1)
        assert equation_of_time(utc(2024, 2, 11, 12, 0)) == pytest.approx(-14.2, abs=1)

    def test_daylight(self):
        """Test day/night at the equinox."""
        at = utc(2024, 3, 20, 12, 0)
        assert is_daylight(0, 0, at) is True
        assert is_daylight(0, 179, at) is False


class TestTimeOfDayLabel:
    """Tests for time_of_day_label."""

    @pytest.mark.parametrize(
        "hour,minute,label",
        [
            (6, 0, "dawn"),
            (9, 15, "morning"),
            (12, 30, "noon"),
            (15, 0, "afternoon"),
            (18, 0, "dusk"),
            (23, 0, "night"),
            (2, 0, "night"),
        ],
    )
    def test_labels_at_greenwich(self, hour, minute, label):
        """Test labels on the Greenwich solar clock."""
        assert time_of_day_label(0, utc(2024, 3, 15, hour, minute)) == label

    def test_huge_longitude(self):
        """Test a label for a far out-of-range longitude."""
        # 1e9 degrees wraps to 80 W, 17:20 UTC is 12:00 solar
        assert time_of_day_label(1e9, utc(2024, 3, 15, 17, 20)) == "noon"

    def test_uses_solar_time(self):
        """Test that longitude shifts the label."""
        # 11:30 UTC is 12:30 solar time at 15 E
        assert time_of_day_label(15, utc(2024, 3, 15, 11, 30)) == "noon"
