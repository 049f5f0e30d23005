"""Unit tests for TTL policies."""

from pricing_cache.cache.ttl import CacheTTL


class TestCacheTTL:
    """Test suite for CacheTTL enum and policies."""

    def test_enum_values_are_positive_integers(self):
        """Test that all TTL values are positive integers."""
        for ttl in CacheTTL:
            assert isinstance(ttl.value, int)
            assert ttl.value > 0

    def test_freshness_window_is_five_minutes(self):
        """Test the default freshness window."""
        assert CacheTTL.RATE_FRESHNESS.value == 300

    def test_grace_window_much_shorter_than_freshness(self):
        """Test the grace window is a small fraction of the freshness window."""
        assert CacheTTL.GRACE_WINDOW.value < CacheTTL.RATE_FRESHNESS.value

    def test_lock_outlives_api_timeout(self):
        """Test a lock holder cannot lose its lock before its call times out."""
        assert CacheTTL.LOCK_TIMEOUT.value >= CacheTTL.API_TIMEOUT.value

    def test_physical_ttl_adds_grace(self):
        """Test entries survive their freshness window by the grace window."""
        assert CacheTTL.physical_ttl(300, 10) == 310

    def test_physical_ttl_ignores_negative_grace(self):
        """Test a negative grace window never shortens the freshness window."""
        assert CacheTTL.physical_ttl(300, -5) == 300
