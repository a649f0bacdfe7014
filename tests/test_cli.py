"""Tests for the CLI."""

import json

import pytest
from click.testing import CliRunner

import truerand.cli as cli
from truerand.provider import RandomnessProvider
from truerand.resolver import StaticResolver

from conftest import FakeTransport


@pytest.fixture
def fake_provider(monkeypatch):
    """Route every CLI command to a provider wired to fakes."""
    made = []

    def _make(obj, quota="1000", addresses=("203.0.113.7",)):
        p = RandomnessProvider(
            transport=FakeTransport(quota=quota),
            resolver=StaticResolver(addresses),
            config=obj["config"],
        )
        made.append((obj, p))
        return p

    monkeypatch.setattr(cli, "_make_provider", _make)
    return made


class TestCLI:
    def test_version(self):
        r = CliRunner().invoke(cli.main, ["--version"])
        assert r.exit_code == 0
        assert "0.3.0" in r.output

    def test_int(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["int", "1", "6"])
        assert r.exit_code == 0, r.output
        assert r.output.strip() == "1"

    def test_batch(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["batch", "--min", "0", "--max", "9", "-n", "5"])
        assert r.exit_code == 0, r.output
        assert r.output.split() == ["0", "1", "2", "3", "4"]

    def test_batch_bad_base(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["batch", "--base", "3"])
        assert r.exit_code != 0

    def test_quota(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["quota"])
        assert r.exit_code == 0
        assert "203.0.113.7" in r.output
        assert "1,000" in r.output

    def test_status_json(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["status", "--json"])
        assert r.exit_code == 0
        data = json.loads(r.output)
        assert data["ready"] is True
        assert data["quota"] == 1000

    def test_host_option(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["--host", "rng.example.org", "--timeout", "2", "quota"])
        assert r.exit_code == 0
        obj, _ = fake_provider[0]
        assert obj["config"].host == "rng.example.org"
        assert obj["config"].timeout == 2.0

    def test_init_failure_exits(self, monkeypatch):
        monkeypatch.setattr(
            cli,
            "_make_provider",
            lambda obj: RandomnessProvider(
                transport=FakeTransport(), resolver=StaticResolver([]), config=obj["config"]
            ),
        )
        r = CliRunner().invoke(cli.main, ["int", "1", "6"])
        assert r.exit_code == 1
        assert "Error" in r.output

    def test_min_above_max_exits(self, fake_provider):
        r = CliRunner().invoke(cli.main, ["int", "9", "1"])
        assert r.exit_code == 1


def test_make_provider_uses_static_address():
    from truerand.config import ProviderConfig

    p = cli._make_provider({"config": ProviderConfig(), "address": "198.51.100.9"})
    assert [str(a) for a in p._resolver.resolve_local_addresses()] == ["198.51.100.9"]
    p.close()
