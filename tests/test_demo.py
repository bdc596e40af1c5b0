"""Tests for demo data module."""

from datetime import datetime, timezone

import pytest

from solarcapsule.demo import DEMO_AUTHOR_ID, DEMO_CITIES, seed_capsules
from solarcapsule.lifecycle import CapsuleService
from solarcapsule.storage import MemoryStore

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    """Service over an empty in-memory store."""
    return CapsuleService(MemoryStore())


class TestSeedCapsules:
    """Tests for seed_capsules."""

    def test_count(self, service):
        """Test that every city gets the requested number of capsules."""
        capsules = seed_capsules(service, NOW, per_city=2, seed=1)
        assert len(capsules) == 2 * len(DEMO_CITIES)
        assert len(service.store.find_capsules(lambda c: True)) == len(capsules)

    def test_all_live_and_valid(self, service):
        """Test that seeded capsules are live, in range and in the right zone."""
        for capsule in seed_capsules(service, NOW, seed=7):
            assert capsule.author_id == DEMO_AUTHOR_ID
            assert capsule.created_at <= NOW
            assert not capsule.is_expired(NOW)
            assert -90 <= capsule.latitude <= 90
            assert -180 <= capsule.longitude < 180
            assert capsule.solar_zone_index == service.current_zone(
                capsule.longitude, capsule.created_at
            )

    def test_reproducible(self):
        """Test that the same seed gives the same capsules."""
        first = seed_capsules(CapsuleService(MemoryStore()), NOW, seed=42)
        second = seed_capsules(CapsuleService(MemoryStore()), NOW, seed=42)
        assert first == second

    def test_zero_per_city(self, service):
        """Test that seeding nothing is allowed."""
        assert seed_capsules(service, NOW, per_city=0) == []

    def test_negative_per_city(self, service):
        """Test that a negative count is rejected."""
        with pytest.raises(ValueError, match="per_city must be non-negative"):
            seed_capsules(service, NOW, per_city=-1)

    def test_custom_author(self, service):
        """Test seeding under another author id."""
        capsules = seed_capsules(service, NOW, per_city=1, author_id=99, seed=3)
        assert {c.author_id for c in capsules} == {99}
