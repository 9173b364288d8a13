"""Percent/URL encoding variants — full, partial, malformed and overloaded forms."""

from __future__ import annotations

import random
from urllib.parse import quote, quote_plus

from wafshift.evasions._common import is_unreserved, layered, utf8_bytes
from wafshift.models.types import EvasionLevel

_UNICODE_PERCENT = {"<": "%u003c", ">": "%u003e", '"': "%u0022", "'": "%u0027", "&": "%u0026"}


def manual_encode(payload: str, upper: bool = False) -> str:
    """Percent-encode every byte outside the unreserved set."""
    fmt = "%{0:02X}" if upper else "%{0:02x}"
    return "".join(
        chr(b) if is_unreserved(b) else fmt.format(b) for b in utf8_bytes(payload)
    )


def force_encode(payload: str, upper: bool = False) -> str:
    """Percent-encode every byte, unreserved characters included."""
    fmt = "%{0:02X}" if upper else "%{0:02x}"
    return "".join(fmt.format(b) for b in utf8_bytes(payload))


def partial_encode(payload: str, ratio: float) -> str:
    """Percent-encode roughly ``ratio`` of the ASCII bytes outside the unreserved set.

    Non-ASCII bytes are always encoded so a multi-byte sequence is never split.
    """
    data = utf8_bytes(payload)
    budget = int(len(data) * ratio)
    out: list[str] = []
    encoded = 0
    for i, b in enumerate(data):
        if b >= 0x80:
            out.append(f"%{b:02x}")
        elif not is_unreserved(b) and encoded < budget and i % 2 == 0:
            out.append(f"%{b:02x}")
            encoded += 1
        else:
            out.append(chr(b))
    return "".join(out)


def _mixed_case(payload: str) -> str:
    return "".join(
        chr(b) if is_unreserved(b) else (f"%{b:02x}" if i % 2 == 0 else f"%{b:02X}")
        for i, b in enumerate(utf8_bytes(payload))
    )


def _unicode_percent(payload: str) -> str:
    out: list[str] = []
    for ch in payload:
        if ord(ch) > 127:
            out.append("".join(f"%{b:02X}" for b in utf8_bytes(ch)))
        elif not is_unreserved(ord(ch)):
            out.append(f"%{ord(ch):02X}")
        else:
            out.append(ch)
    return "".join(out)


def _malformed(payload: str) -> str:
    out: list[str] = []
    for b in utf8_bytes(payload):
        if is_unreserved(b):
            out.append(chr(b))
        elif b % 4 == 0:
            out.append(f"%{b:02x}")
        elif b % 4 == 1:
            out.append(f"%0{b:x}")
        elif b % 4 == 2:
            out.append(f"%{b:x}")
        else:
            out.append(f"%{b:02X}")
    return "".join(out)


def _overloaded(payload: str) -> str:
    return "".join(
        f"%{b:02x}" if not is_unreserved(b) or b % 3 == 0 else chr(b)
        for b in utf8_bytes(payload)
    )


def _null_byte(payload: str) -> str:
    encoded = manual_encode(payload)
    if len(encoded) > 4:
        mid = len(encoded) // 2
        return encoded[:mid] + "%00" + encoded[mid:]
    return encoded + "%00"


def _tab_newline(payload: str) -> str:
    out: list[str] = []
    for i, b in enumerate(utf8_bytes(payload)):
        if is_unreserved(b):
            out.append(chr(b))
        elif i % 5 == 0:
            out.append(f"%09%{b:02x}")
        elif i % 7 == 0:
            out.append(f"%0A%{b:02x}")
        else:
            out.append(f"%{b:02x}")
    return "".join(out)


def _backslash(payload: str) -> str:
    return "".join(
        chr(b) if is_unreserved(b) else f"\\x{b:02x}" for b in utf8_bytes(payload)
    )


def _unicode_normalization(payload: str) -> str:
    out: list[str] = []
    for ch in payload:
        if ch in _UNICODE_PERCENT:
            out.append(_UNICODE_PERCENT[ch])
        else:
            out.append(manual_encode(ch))
    return "".join(out)


def basic_forms(payload: str) -> list[str]:
    query = quote_plus(payload, safe="")
    variants = [
        query,
        quote(payload),
        manual_encode(payload),
        manual_encode(payload, upper=True),
    ]
    if query == payload:
        variants.append(force_encode(payload))
        variants.append(force_encode(payload, upper=True))
    return variants


def medium_forms(payload: str) -> list[str]:
    return [
        partial_encode(payload, 0.5),
        partial_encode(payload, 0.3),
        _mixed_case(payload),
        _unicode_percent(payload),
        manual_encode(payload).replace("%20", "+"),
    ]


def _basic(payload: str, rng: random.Random) -> list[str]:
    return basic_forms(payload)


def _medium(payload: str, rng: random.Random) -> list[str]:
    return medium_forms(payload)


def _advanced(payload: str, rng: random.Random) -> list[str]:
    return [
        quote_plus(quote_plus(payload, safe=""), safe=""),
        quote_plus(manual_encode(payload, upper=True), safe=""),
        _malformed(payload),
        _overloaded(payload),
        _null_byte(payload),
        _tab_newline(payload),
        _backslash(payload),
        _unicode_normalization(payload),
    ]


def url_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
