"""HTML entity variants — numeric, named, fragmented and context-wrapped forms."""

from __future__ import annotations

import random

from wafshift.evasions._common import layered, per_byte, utf8_bytes
from wafshift.models.types import EvasionLevel

NAMED_ENTITIES: dict[str, str] = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
    "&": "&amp;",
}

_UPPER_NAMED: dict[str, str] = {
    "<": "&LT;",
    ">": "&GT;",
    '"': "&QUOT;",
    "&": "&AMP;",
    "'": "&#39;",
}

_INVALID_PADDING = ("\u200b", " ", "\t")


def _decimal(payload: str) -> str:
    return per_byte(payload, "&#{0};")


def _named(payload: str, table: dict[str, str] = NAMED_ENTITIES) -> str:
    return "".join(table.get(ch, ch) for ch in payload)


def _basic(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    return [
        _decimal(payload),
        per_byte(payload, "&#x{0:02x};"),
        per_byte(payload, "&#X{0:02X};"),
        _named(payload),
        "".join(
            f"&#{b};" if i % 2 == 0 else f"&#x{b:02x};" for i, b in enumerate(data)
        ),
    ]


def _medium(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    decimal = _decimal(payload)
    partial = "".join(
        per_byte(ch, "&#{0};") if rng.random() < 0.5 else ch for ch in payload
    )
    mixed_case_hex = "".join(
        f"&#x{b:02x};" if i % 2 == 0 else f"&#X{b:02X};" for i, b in enumerate(data)
    )
    return [
        partial,
        mixed_case_hex,
        per_byte(payload, "&#{0}"),
        per_byte(payload, "&#{0:07d};"),
        "javascript:String.fromCharCode(" + ",".join(str(b) for b in data) + ")",
        per_byte(payload, "&#<!---->{0};"),
        decimal.replace("&", "&amp;"),
        f'<div title="{decimal}"></div>',
    ]


def _advanced(payload: str, rng: random.Random) -> list[str]:
    data = utf8_bytes(payload)
    decimal = _decimal(payload)
    hex_lower = per_byte(payload, "&#x{0:02x};")

    def _any_radix(b: int) -> str:
        named = NAMED_ENTITIES.get(chr(b)) if b < 0x80 else None
        options = [f"&#{b};", f"&#x{b:02x};"] + ([named] if named else [])
        return rng.choice(options)

    variants = [
        _decimal(_named(payload)),
        decimal.replace("&", "&amp;amp;"),
        per_byte(payload, "\\{0:x} "),
        per_byte(payload, "%26%23{0}%3B"),
    ]
    variants.extend(per_byte(payload, "&#" + pad + "{0};") for pad in _INVALID_PADDING)
    variants.extend([
        _named(payload, _UPPER_NAMED),
        per_byte(payload, "&#\r{0};"),
        "".join(_any_radix(b) for b in data),
        per_byte(payload, "&#x0000{0:x};"),
        per_byte(payload, "&#{0:010d};"),
        f"<!--[if IE]>{decimal}<![endif]-->",
        f'<div data-payload="{hex_lower}"></div>',
        f"<svg><![CDATA[{decimal}]]></svg>",
        f"<template>{decimal}</template>",
        "".join(f"\\u{ord(ch):04x}" for ch in payload),
        '<meta charset="UTF-7">' + payload.encode("utf-7").decode("ascii"),
    ])
    return variants


def html_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
