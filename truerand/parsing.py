"""Strict parsers for the service's plain-text response bodies."""

from __future__ import annotations

import re

from truerand.errors import ParseError

_QUOTA_RE = re.compile(r"-?[0-9]+")
# One optional sign, then digits valid for the widest supported base.
_INT_LINE_RE = re.compile(r"-?[0-9A-Fa-f]+")


def parse_quota(body: str) -> int:
    """Parse a quota body: exactly one decimal integer, possibly negative."""
    text = body.strip()
    if not _QUOTA_RE.fullmatch(text):
        raise ParseError(f"Failed to get parsable quota: {body!r}", body=body)
    return int(text)


def parse_integers(body: str, base: int = 10) -> list[int]:
    """Parse newline-separated integers written in *base*.

    Blank lines are skipped. A single malformed line fails the whole body.
    """
    values: list[int] = []
    for lineno, raw in enumerate(body.splitlines(), 1):
        line = raw.strip()
        if not line:
            continue
        if not _INT_LINE_RE.fullmatch(line):
            raise ParseError(f"line {lineno} is not an integer: {raw!r}", body=body)
        try:
            values.append(int(line, base))
        except ValueError as e:
            raise ParseError(f"line {lineno} is not a base-{base} integer: {raw!r}", body=body) from e
    return values
