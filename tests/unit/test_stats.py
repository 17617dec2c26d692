"""Tests for aggregate statistics."""

from datetime import datetime

from carespace.core.stats import overall_stats, specialty_stats


class TestOverallStats:
    """Test overall_stats."""

    def test_totals(self, store):
        stats = overall_stats(store, now=datetime(2025, 7, 1))

        assert stats["doctors"] == {"total": 3, "with_dedicated_space": 1, "specialties": 3}
        assert stats["spaces"] == {"total": 4, "bookable": 3, "categories": 4}
        assert stats["bookings"] == {"total": 1, "upcoming": 1}
        assert stats["timestamp"] == "2025-07-01T00:00:00"

    def test_past_bookings_are_not_upcoming(self, store):
        stats = overall_stats(store, now=datetime(2025, 8, 1))
        assert stats["bookings"]["upcoming"] == 0


class TestSpecialtyStats:
    """Test specialty_stats."""

    def test_counts_per_specialty(self, store):
        assert specialty_stats(store) == {
            "Pediatric": {"count": 1, "with_dedicated_space": 1},
            "Cardiology": {"count": 1, "with_dedicated_space": 0},
            "Research": {"count": 1, "with_dedicated_space": 0},
        }
