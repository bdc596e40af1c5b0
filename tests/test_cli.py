"""Tests for command-line interface."""

import json

import pytest
from click.testing import CliRunner

from solarcapsule.cli import cli

T0 = "2024-06-10T00:00:00+00:00"


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def store_args(tmp_path):
    """Global options pointing at a temporary store."""
    return ["--store", str(tmp_path / "capsules.json")]


class TestSolarCommands:
    """Tests for commands that need no store."""

    def test_zone(self, runner):
        """Test the zone command."""
        result = runner.invoke(cli, ["zone", "--lon", "116.4", "--at", T0])
        assert result.exit_code == 0, result.output
        assert "Zone: 16 of 51" in result.output
        assert "Solar time: 07:45 (morning)" in result.output

    def test_zone_huge_longitude(self, runner):
        """Test that a far out-of-range longitude wraps instead of failing."""
        result = runner.invoke(cli, ["zone", "--lon", "1e9", "--at", T0])
        assert result.exit_code == 0, result.output
        assert "Zone: 39 of 51" in result.output
        assert "Solar time: 18:40 (dusk)" in result.output

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_zone_rejects_non_finite_longitude(self, runner, value):
        """Test that a non-finite longitude is reported, not raised."""
        result = runner.invoke(cli, ["zone", "--lon", value, "--at", T0])
        assert result.exit_code == 1
        assert "Invalid coordinates" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_zone_rejects_bad_instant(self, runner):
        """Test that an unparseable instant is a usage error."""
        result = runner.invoke(cli, ["zone", "--lon", "0", "--at", "yesterday"])
        assert result.exit_code == 2
        assert "not an ISO-8601" in result.output

    def test_sun(self, runner):
        """Test the sun command."""
        result = runner.invoke(
            cli, ["sun", "--at", "2024-03-20T12:00:00", "--lat", "0", "--lon", "0"]
        )
        assert result.exit_code == 0, result.output
        assert "Sub-solar point" in result.output
        assert "is in day" in result.output

    def test_drift(self, runner):
        """Test the drift command."""
        result = runner.invoke(
            cli,
            ["drift", "--lon", "60", "--created", T0, "--at", "2024-06-10T02:00:00+00:00"],
        )
        assert result.exit_code == 0, result.output
        assert "Drifted longitude: 30.0000" in result.output


class TestCapsuleCommands:
    """Tests for commands backed by the capsule store."""

    def test_drop_reply_and_read(self, runner, store_args):
        """Test a full drop, reply and read cycle."""
        result = runner.invoke(
            cli,
            store_args
            + ["drop", "--user", "1", "--lat", "39.9", "--lon", "116.4",
               "--text", "hello", "--at", T0],
        )
        assert result.exit_code == 0, result.output
        assert "Capsule 1 dropped in zone 16" in result.output

        result = runner.invoke(
            cli,
            store_args
            + ["reply", "--capsule", "1", "--user", "2", "--text", "hi back",
               "--at", "2024-06-10T05:00:00+00:00"],
        )
        assert result.exit_code == 0, result.output
        assert "Reply 1 sent to capsule 1" in result.output

        result = runner.invoke(
            cli,
            store_args
            + ["replies", "--capsule", "1", "--user", "1", "--json",
               "--at", "2024-06-10T20:00:00+00:00"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["is_author"] is True
        assert data["total_replies"] == 1
        assert data["visible_count"] == 0

        result = runner.invoke(
            cli,
            store_args + ["inbox", "--user", "1", "--json", "--at", "2024-06-11T06:00:00+00:00"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_unread"] == 1
        assert data["items"][0]["latest_reply"]["preview"] == "hi back"

    def test_globe(self, runner, store_args):
        """Test the globe command by zone and by longitude."""
        runner.invoke(
            cli,
            store_args
            + ["drop", "--user", "1", "--lat", "20", "--lon", "60", "--text", "zone 8",
               "--at", T0],
        )

        result = runner.invoke(
            cli, store_args + ["globe", "--zone", "8", "--json", "--at", T0]
        )
        assert result.exit_code == 0, result.output
        pins = json.loads(result.output)
        assert [p["id"] for p in pins] == [1]

        result = runner.invoke(
            cli, store_args + ["globe", "--lon", "60", "--lat", "20", "--at", T0]
        )
        assert result.exit_code == 0, result.output
        assert "Zone 8: 1 capsule(s)" in result.output
        assert "0 km away" in result.output

    def test_globe_needs_zone_or_longitude(self, runner, store_args):
        """Test that globe requires a way to pick the zone."""
        result = runner.invoke(cli, store_args + ["globe"])
        assert result.exit_code == 2

    def test_drop_invalid_coordinates(self, runner, store_args):
        """Test that invalid coordinates fail the command."""
        result = runner.invoke(
            cli,
            store_args + ["drop", "--user", "1", "--lat", "95", "--lon", "0", "--text", "x"],
        )
        assert result.exit_code == 1
        assert "Invalid coordinates" in result.output

    def test_globe_rejects_non_finite_longitude(self, runner, store_args):
        """Test that globe validates the viewer longitude."""
        result = runner.invoke(cli, store_args + ["globe", "--lon", "nan"])
        assert result.exit_code == 1
        assert "Invalid coordinates" in result.output

    def test_reply_unknown_capsule(self, runner, store_args):
        """Test replying to a capsule that does not exist."""
        result = runner.invoke(
            cli, store_args + ["reply", "--capsule", "9", "--user", "2", "--text", "x"]
        )
        assert result.exit_code == 1
        assert "Capsule not found" in result.output


class TestSeedCommand:
    """Tests for the seed command."""

    def test_seed_then_globe(self, runner, store_args):
        """Test that seeded capsules show up on the globe."""
        result = runner.invoke(
            cli, store_args + ["seed", "--per-city", "1", "--seed", "5", "--at", T0]
        )
        assert result.exit_code == 0, result.output
        assert "Seeded 24 capsule(s)" in result.output

        result = runner.invoke(
            cli, store_args + ["globe", "--zone", "0", "--user", "0", "--at", T0, "--json"]
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 24


class TestConfigCommand:
    """Tests for the config command."""

    def test_show(self, runner, tmp_path):
        """Test showing the default configuration."""
        result = runner.invoke(cli, ["config", "--show"])
        assert result.exit_code == 0, result.output
        assert "total_zones: 51" in result.output

    def test_create(self, runner, tmp_path):
        """Test creating a configuration file."""
        output = tmp_path / "config.yaml"
        result = runner.invoke(cli, ["config", "--create", "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert output.exists()
