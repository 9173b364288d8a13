"""Unicode escape variants — whole code points in JS, HTML, legacy and U+ forms.

Basic encodes every character, Medium keeps letters and digits readable, and
Advanced layers visual tricks (homoglyphs, bidi overrides, invisible marks).
"""

from __future__ import annotations

import random
from collections.abc import Callable

from wafshift.evasions._common import layered
from wafshift.models.types import EvasionLevel

# Cyrillic / Armenian lookalikes for Latin lowercase letters
HOMOGLYPHS: dict[str, str] = {
    "a": "а",
    "e": "е",
    "o": "о",
    "p": "р",
    "c": "с",
    "x": "х",
    "i": "і",
    "j": "ј",
    "n": "ո",
    "y": "у",
}

COMBINING_MARKS = tuple(chr(cp) for cp in range(0x0300, 0x030A))

INVISIBLE_CONTROLS = (
    "\u200b",  # zero-width space
    "\u200c",  # zero-width non-joiner
    "\u200d",  # zero-width joiner
    "\u2060",  # word joiner
    "\u200e",  # left-to-right mark
    "\u200f",  # right-to-left mark
    "\ufeff",  # zero-width no-break space
)

_PRECOMPOSED = {"a": "á", "e": "é", "i": "í", "o": "ó", "u": "ú", "n": "ñ"}

_SPECIAL_FOLDING = {
    "ß": "ss",
    "ı": "i",
    "İ": "i",
    "ſ": "s",
    "ﬀ": "ff",
    "ﬁ": "fi",
    "ﬂ": "fl",
    "ﬃ": "ffi",
    "ﬄ": "ffl",
}

LRO, RLO, PDF = "\u202d", "\u202e", "\u202c"

# One formatter per escape syntax; all take a single character.
ESCAPE_FORMS: tuple[Callable[[str], str], ...] = (
    lambda ch: f"\\u{ord(ch):04X}",
    lambda ch: f"\\u{{{ord(ch):X}}}",
    lambda ch: f"&#x{ord(ch):04X};",
    lambda ch: f"&#{ord(ch)};",
    lambda ch: f"%u{ord(ch):04X}",
)


def _code_points(payload: str) -> str:
    return " ".join(f"U+{ord(ch):04X}" for ch in payload)


def _encode_all(payload: str) -> list[str]:
    return ["".join(form(ch) for ch in payload) for form in ESCAPE_FORMS] + [
        _code_points(payload),
    ]


def _encode_partial(payload: str) -> list[str]:
    def keep(ch: str) -> bool:
        return ch.isalpha() or ch.isdigit()

    variants = [
        "".join(ch if keep(ch) else form(ch) for ch in payload)
        for form in ESCAPE_FORMS
    ]
    parts: list[str] = []
    for ch in payload:
        parts.append(ch if keep(ch) else f"U+{ord(ch):04X} ")
    variants.append("".join(parts).strip())
    return variants


def _basic(payload: str, rng: random.Random) -> list[str]:
    return _encode_all(payload)


def _medium(payload: str, rng: random.Random) -> list[str]:
    return _encode_partial(payload)


# --- Advanced helpers ---


def insert_zero_width(payload: str, zw: str = "\u200b") -> str:
    return zw.join(payload)


def _mixed_encoding(payload: str, rng: random.Random) -> str:
    forms: list[Callable[[str], str]] = [
        lambda ch: ch,
        ESCAPE_FORMS[0],
        ESCAPE_FORMS[2],
        ESCAPE_FORMS[3],
    ]
    return "".join(rng.choice(forms)(ch) for ch in payload)


def _mixed_encoding_extended(payload: str, rng: random.Random) -> str:
    forms: list[Callable[[str], str]] = [
        lambda ch: ch,
        ESCAPE_FORMS[0],
        ESCAPE_FORMS[2],
        ESCAPE_FORMS[3],
        ESCAPE_FORMS[4],
        lambda ch: f"\\{ord(ch):X} ",
    ]
    return "".join(rng.choice(forms)(ch) for ch in payload)


def substitute_homoglyphs(payload: str, rng: random.Random) -> str:
    return "".join(
        HOMOGLYPHS[ch] if ch in HOMOGLYPHS and rng.random() < 0.5 else ch
        for ch in payload
    )


def _combining_marks(payload: str, rng: random.Random) -> str:
    out: list[str] = []
    for ch in payload:
        out.append(ch)
        out.extend(rng.choice(COMBINING_MARKS) for _ in range(rng.randint(1, 3)))
    return "".join(out)


def _invisible_controls(payload: str, rng: random.Random) -> str:
    out: list[str] = []
    for i, ch in enumerate(payload):
        out.append(ch)
        if i < len(payload) - 1:
            out.extend(
                rng.choice(INVISIBLE_CONTROLS) for _ in range(rng.randint(1, 3))
            )
    return "".join(out)


def _precomposed(payload: str, rng: random.Random) -> str:
    return "".join(
        _PRECOMPOSED[ch] if ch in _PRECOMPOSED and rng.random() < 0.5 else ch
        for ch in payload
    )


def _case_folding(payload: str) -> str:
    out: list[str] = []
    for ch in payload:
        if ch in _SPECIAL_FOLDING:
            out.append(_SPECIAL_FOLDING[ch])
        elif ch.isupper():
            out.append(ch.lower())
        elif ch.islower():
            out.append(ch.upper())
        else:
            out.append(ch)
    return "".join(out)


def _advanced(payload: str, rng: random.Random) -> list[str]:
    return [
        insert_zero_width(payload),
        _mixed_encoding(payload, rng),
        _mixed_encoding_extended(payload, rng),
        f"{LRO}{payload}{PDF}{RLO}{payload}{PDF}",
        substitute_homoglyphs(payload, rng),
        _combining_marks(payload, rng),
        _invisible_controls(payload, rng),
        _precomposed(payload, rng),
        _case_folding(payload),
        f"{RLO}{payload[::-1]}{PDF}",
    ]


def unicode_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
