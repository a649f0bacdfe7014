"""Tests for provider configuration."""

from truerand.config import ProviderConfig, clamp


class TestProviderConfig:
    def test_defaults(self):
        c = ProviderConfig()
        assert c.quota_endpoint == "https://www.random.org/quota/"
        assert c.integers_endpoint == "http://www.random.org/integers/"
        assert c.call_cooldown_ms == 10
        assert c.quota_cooldown_ms == 60_000
        assert c.quota_max_age is None

    def test_from_env(self):
        c = ProviderConfig.from_env({
            "TRUERAND_HOST": "rng.example.org",
            "TRUERAND_TIMEOUT": "2.5",
            "TRUERAND_QUOTA_MAX_AGE": "600",
        })
        assert c.host == "rng.example.org"
        assert c.timeout == 2.5
        assert c.quota_max_age == 600.0
        assert c.integers_endpoint == "http://rng.example.org/integers/"

    def test_from_env_empty(self):
        assert ProviderConfig.from_env({}) == ProviderConfig()

    def test_with_overrides_ignores_none(self):
        c = ProviderConfig().with_overrides(host="h", timeout=None)
        assert c.host == "h"
        assert c.timeout == 10.0


def test_clamp():
    assert clamp(5, 1, 3) == 3
    assert clamp(-5, 1, 3) == 1
    assert clamp(2, 1, 3) == 2
