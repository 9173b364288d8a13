"""Octal variants — plain, C-style, mixed-radix and script-embedded forms."""

from __future__ import annotations

import random

from wafshift.evasions._common import layered, per_byte, utf8_bytes
from wafshift.models.types import EvasionLevel


def _escapes(payload: str) -> list[str]:
    return [f"\\{b:03o}" for b in utf8_bytes(payload)]


def _basic(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    spaced = "".join(
        f"{b:o}" + (rng.choice((" ", "  ", "   ")) if i < len(data) - 1 else "")
        for i, b in enumerate(data)
    )
    return [
        per_byte(payload, "{0:o}", sep=" "),
        per_byte(payload, "0{0:o}", sep=" "),
        "".join(_escapes(payload)),
        per_byte(payload, "\\0{0:03o}"),
        spaced,
        per_byte(payload, "{0:o}", sep="\t"),
    ]


def _alternate(data: bytes, even: str, odd: str) -> str:
    return "".join(
        (even if i % 2 == 0 else odd).format(b) for i, b in enumerate(data)
    )


def _medium(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    escapes = _escapes(payload)
    partial = "".join(
        ch if ch.isascii() and ch.isalnum() else per_byte(ch, "\\{0:03o}")
        for ch in payload
    )
    return [
        _alternate(data, "\\{0:03o}", "0b{0:08b}"),
        _alternate(data, "\\{0:03o}", "\\x{0:02x}"),
        _alternate(data, "\\{0:03o}", "&#{0};"),
        partial,
        "+".join(f"'{e}'" for e in escapes),
        "$'" + "".join(escapes) + "'",
        per_byte(payload, "\\{0:05o}"),
        "+".join(f'"{e[:2]}"+"{e[2:]}"' for e in escapes),
    ]


def _mixed_radix(b: int, rng: random.Random) -> str:
    return rng.choice((f"\\{b:03o}", f"\\x{b:02x}", f"&#{b};", f"%{b:02X}"))


def _advanced(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    escapes = _escapes(payload)
    joined = "".join(escapes)
    shuffled = list(escapes)
    rng.shuffle(shuffled)
    with_controls = "".join(
        e + ("\\000" if rng.random() < 0.3 else "") for e in escapes
    )
    return [
        "\\\n".join(escapes),
        "/**/".join(escapes),
        "".join(f"\\{e}" for e in escapes),
        "".join(_mixed_radix(b, rng) for b in data),
        with_controls,
        "../" + joined,
        joined.replace("\\", "%5C%5C"),
        "".join(shuffled),
        _alternate(data, "\\{0:03o}", "\\u{0:04x}"),
        "".join(f"x{i}={e};" for i, e in enumerate(escapes, 1)),
        'eval("' + joined.replace("\\", "\\\\") + '")',
        "".join(e + rng.choice((" ", "\t", "\n", "\r")) for e in escapes).rstrip(),
    ]


def octal_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
