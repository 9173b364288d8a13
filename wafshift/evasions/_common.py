"""Shared helpers for evasion techniques — tier layering, dedup, byte views."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence

from wafshift.models.types import EvasionLevel

# One tier produces the variants that a level adds on top of the previous one.
Tier = Callable[[str, random.Random], list[str]]


def unique(items: Iterable[str]) -> list[str]:
    """Order-preserving exact-match dedup. Empty strings are dropped."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def layered(
    payload: str,
    level: EvasionLevel,
    tiers: Sequence[Tier],
    rng: random.Random | None = None,
) -> list[str]:
    """Run tiers up to ``level`` and return the deduplicated union.

    Tiers are evaluated in order, so a higher level only ever appends to the
    lower level's output.
    """
    if not payload:
        return []
    rng = rng or random.Random()
    variants: list[str] = []
    for tier in tiers[: int(level)]:
        variants.extend(tier(payload, rng))
    return unique(variants)


def utf8_bytes(payload: str) -> bytes:
    return payload.encode("utf-8", errors="surrogatepass")


def per_byte(payload: str, fmt: str, sep: str = "") -> str:
    """Format every UTF-8 byte with ``fmt`` (a str.format spec taking the int)."""
    return sep.join(fmt.format(b) for b in utf8_bytes(payload))


def is_unreserved(b: int) -> bool:
    """RFC 3986 unreserved characters (never percent-encoded)."""
    return (
        0x30 <= b <= 0x39
        or 0x41 <= b <= 0x5A
        or 0x61 <= b <= 0x7A
        or b in (0x2D, 0x2E, 0x5F, 0x7E)
    )


def split_segments(path: str) -> list[str]:
    return path.split("/")
