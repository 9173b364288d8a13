"""Base64 variants — standard, URL-safe and padding-manipulated forms."""

from __future__ import annotations

import base64
import random

from wafshift.evasions._common import layered, utf8_bytes
from wafshift.models.types import EvasionLevel


def _std(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _urlsafe(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


def _basic(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    std = _std(data)
    url = _urlsafe(data)
    return [
        std,
        std.rstrip("="),
        url,
        url.rstrip("="),
        url + "=",
        url[:-1],
    ]


def _medium(payload: str, rng: random.Random) -> list[str]:
    std = _std(utf8_bytes(payload))
    return [
        std + "=",
        std + "===",
        std[:-1],
        std[:-2],
    ]


def _advanced(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    std = _std(data)
    reversed_payload = payload[::-1]
    return [
        _std(std.encode("ascii")),
        _std(utf8_bytes(reversed_payload)),
    ]


def base64_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
