"""CLI for truerand."""

from __future__ import annotations

import json
import logging
import sys

import click

from truerand import __version__
from truerand.config import ABS_MAX, ABS_MIN, SUPPORTED_BASES, ProviderConfig
from truerand.errors import ProviderError


@click.group()
@click.version_option(__version__)
@click.option("--host", default=None, help="Randomness service hostname.")
@click.option("--timeout", default=None, type=float, help="Network timeout in seconds.")
@click.option("--address", default=None, help="Public IPv4 address to report (skips local lookup).")
@click.option("-v", "--verbose", is_flag=True, help="Log routing decisions to stderr.")
@click.pass_context
def main(ctx: click.Context, host: str | None, timeout: float | None, address: str | None, verbose: bool) -> None:
    """truerand: true random integers with a local fallback."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    ctx.obj = {
        "config": ProviderConfig.from_env().with_overrides(host=host, timeout=timeout),
        "address": address,
    }


# ────────────────────────────────────────────────────────────
# Numbers
# ────────────────────────────────────────────────────────────


@main.command("int")
@click.argument("low", type=int)
@click.argument("high", type=int)
@click.pass_obj
def int_(obj: dict, low: int, high: int) -> None:
    """Print one integer in [LOW, HIGH]."""
    provider = _ready_provider(obj)
    with provider:
        click.echo(_or_exit(provider.next, low, high))


@main.command()
@click.option("--min", "low", default=ABS_MIN, type=int, help="Smallest value (inclusive).")
@click.option("--max", "high", default=ABS_MAX, type=int, help="Largest value (inclusive).")
@click.option("-n", "count", default=10, type=int, help="How many integers.")
@click.option("--base", default=10, type=click.Choice([str(b) for b in SUPPORTED_BASES]),
              help="Base the service writes numbers in.")
@click.pass_obj
def batch(obj: dict, low: int, high: int, count: int, base: str) -> None:
    """Print a batch of integers, one per line."""
    provider = _ready_provider(obj)
    with provider:
        for v in _or_exit(provider.next_batch, low, high, count, int(base)):
            click.echo(v)


# ────────────────────────────────────────────────────────────
# Quota & status
# ────────────────────────────────────────────────────────────


@main.command()
@click.pass_obj
def quota(obj: dict) -> None:
    """Print the remaining quota for this address."""
    provider = _ready_provider(obj)
    with provider:
        click.echo(f"Address: {provider.public_address}")
        click.echo(f"Quota:   {provider.quota:,}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Emit JSON.")
@click.pass_obj
def status(obj: dict, as_json: bool) -> None:
    """Initialize the provider and show its state."""
    provider = _ready_provider(obj)
    with provider:
        st = provider.status()
    if as_json:
        click.echo(json.dumps(st, indent=2))
        return
    for key, value in st.items():
        click.echo(f"  {key:<22} {value}")


# ────────────────────────────────────────────────────────────
# Server
# ────────────────────────────────────────────────────────────


@main.command()
@click.option("--port", default=8043, help="Port to listen on.")
@click.option("--bind", default="127.0.0.1", help="Bind address.")
@click.pass_obj
def server(obj: dict, port: int, bind: str) -> None:
    """Serve integers over HTTP from one shared provider.

    Endpoints:

        GET /integers?num=N&min=A&max=B&base=10

        GET /quota

        GET /health
    """
    from truerand.http_server import run_server

    provider = _ready_provider(obj)
    click.echo(f"truerand server v{__version__}")
    click.echo(f"   Listening on http://{bind}:{port}")
    click.echo(f"   Quota: {provider.quota:,}")
    with provider:
        run_server(provider, host=bind, port=port)


# ────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────


def _make_provider(obj: dict):
    from truerand.provider import RandomnessProvider
    from truerand.resolver import StaticResolver

    resolver = StaticResolver([obj["address"]]) if obj.get("address") else None
    return RandomnessProvider(resolver=resolver, config=obj["config"])


def _ready_provider(obj: dict):
    provider = _make_provider(obj)
    _or_exit(provider.ensure_ready)
    return provider


def _or_exit(fn, *args):
    """Call *fn*, turning provider errors into a message and exit code 1."""
    try:
        return fn(*args)
    except (ProviderError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
