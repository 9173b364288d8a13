"""UTF-8 byte and normalization variants."""

from __future__ import annotations

import random

from wafshift.evasions._common import layered, per_byte, utf8_bytes
from wafshift.models.types import EvasionLevel

_NFC_SPLIT = {"é": "e\u0301", "ñ": "n\u0303", "ü": "u\u0308"}
_NFD_SPLIT = {"a": "a\u0300", "e": "e\u0301", "i": "i\u0302"}
_CONTROL_CHARS = ("\x00", "\x01", "\x02", "\x03", "\x04", "\x05")
_ZERO_WIDTH = ("\u200b", "\u200c", "\u200d", "\ufeff")
_DIRECTIONAL = ("\u202a", "\u202b", "\u202c", "\u202d", "\u202e")
_FULLWIDTH = {"A": "Ａ", "a": "ａ", "0": "０", "<": "＜", ">": "＞"}


def _overlong(payload: str) -> str:
    out: list[str] = []
    for ch in payload:
        cp = ord(ch)
        if cp < 0x80:
            out.append(f"\\x{0xC0 | (cp >> 6):02x}\\x{0x80 | (cp & 0x3F):02x}")
        else:
            out.append(ch)
    return "".join(out)


def _mixed(payload: str) -> str:
    forms = ("\\x{0:02x}", "\\{0:03o}", "&#{0};")
    return "".join(
        ch if i % 4 == 3 else per_byte(ch, forms[i % 4]) for i, ch in enumerate(payload)
    )


def _interleave(payload: str, every: int, marks: tuple[str, ...], limit: int | None = None) -> str:
    """Append a mark after every ``every``-th character, cycling through ``marks``."""
    out: list[str] = []
    inserted = 0
    for i, ch in enumerate(payload):
        out.append(ch)
        if i % every == 0 and (limit is None or i < limit):
            out.append(marks[inserted % len(marks)])
            inserted += 1
    return "".join(out)


def _malformed(payload: str) -> str:
    return "".join(
        f"\\x{0xC0 | ord(ch):02x}" if i % 5 == 0 and ord(ch) < 0x80 else ch
        for i, ch in enumerate(payload)
    )


def _surrogates(payload: str) -> str:
    out: list[str] = []
    for ch in payload:
        cp = ord(ch)
        if cp > 0xFFFF:
            cp -= 0x10000
            out.append(f"\\u{0xD800 + (cp >> 10):04X}\\u{0xDC00 + (cp & 0x3FF):04X}")
        else:
            out.append(ch)
    return "".join(out)


def _basic(payload: str, rng: random.Random) -> list[str]:
    return [
        per_byte(payload, "\\x{0:02x}"),
        per_byte(payload, "\\{0:03o}"),
        per_byte(payload, "&#{0};"),
        per_byte(payload, "\\b{0:08b}"),
        per_byte(payload, "%{0:02X}"),
    ]


def _medium(payload: str, rng: random.Random) -> list[str]:
    return [
        _overlong(payload),
        "".join(_NFC_SPLIT.get(ch, ch) for ch in payload),
        "".join(_NFD_SPLIT.get(ch, ch) for ch in payload),
        _mixed(payload),
        "".join(ch + ("\\x00" if i % 3 == 0 else "") for i, ch in enumerate(payload)),
        "\\xEF\\xBB\\xBF" + payload,
    ]


def _advanced(payload: str, rng: random.Random) -> list[str]:
    return [
        _malformed(payload),
        _surrogates(payload),
        _interleave(payload, 4, ("\ufffd",)),
        _interleave(payload, 6, _CONTROL_CHARS, limit=len(_CONTROL_CHARS)),
        _interleave(payload, 4, _ZERO_WIDTH),
        _interleave(payload, 5, _DIRECTIONAL),
        "".join(_FULLWIDTH.get(ch, ch) for ch in payload),
    ]


def utf8_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
