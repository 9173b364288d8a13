"""Hex variants — per-byte escapes in brace, backslash, percent and concat forms."""

from __future__ import annotations

import random

from wafshift.evasions._common import layered, per_byte, utf8_bytes
from wafshift.models.types import EvasionLevel

_WHITESPACE_SUFFIXES = ("\\xA0", "\\x09", "\\x0C")
_CONTROL_BYTES = tuple(f"\\x{b:02X}" for b in range(0x10) if b != 0x09)


def _brace(payload: str, upper: bool) -> str:
    return per_byte(payload, "\\x{{{0:02X}}}" if upper else "\\x{{{0:02x}}}")


def _backslash(payload: str, upper: bool) -> str:
    return per_byte(payload, "\\x{0:02X}" if upper else "\\x{0:02x}")


def _js_concat(payload: str, upper: bool) -> str:
    return per_byte(payload, "'\\x{0:02X}'" if upper else "'\\x{0:02x}'", sep="+")


def _basic(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    brace_lower = _brace(payload, upper=False)
    brace_upper = _brace(payload, upper=True)
    return [
        brace_lower,
        brace_upper,
        brace_lower.replace("}", "00}"),
        brace_upper.replace("}", "00}"),
        data.hex(),
        data.hex().upper(),
        _backslash(payload, upper=False),
        _backslash(payload, upper=True),
        per_byte(payload, "%{0:02x}"),
        per_byte(payload, "%{0:02X}"),
        _js_concat(payload, upper=False),
        _js_concat(payload, upper=True),
    ]


def _medium(payload: str, rng: random.Random) -> list[str]:
    variants = [payload + suffix for suffix in _WHITESPACE_SUFFIXES]
    variants.append("".join(
        f"\\x{b:02x}" if i % 2 == 0 else f"\\X{b:02X}"
        for i, b in enumerate(utf8_bytes(payload))
    ))
    variants.append("0x" + utf8_bytes(payload).hex())
    variants.append(per_byte(payload, "0x{0:02x}", sep=" "))
    return variants


def _insert_at_random(text: str, insert: str, rng: random.Random) -> str:
    pos = rng.randint(0, len(text))
    return text[:pos] + insert + text[pos:]


def _advanced(payload: str, rng: random.Random) -> list[str]:
    escaped = _backslash(payload, upper=False)
    percent = per_byte(payload, "%{0:02x}")
    # Insert on escape boundaries so the remaining escapes stay intact.
    chunks = [escaped[i:i + 4] for i in range(0, len(escaped), 4)]
    pos = rng.randint(0, len(chunks))
    control = rng.choice(_CONTROL_BYTES)
    return [
        "".join(chunks[:pos] + [control] + chunks[pos:]),
        _insert_at_random(payload, rng.choice(_CONTROL_BYTES), rng),
        escaped.replace("\\x", "\\x00\\x"),
        percent.replace("%", "%00%"),
    ]


def hex_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
