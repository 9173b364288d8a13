"""Letter-case manipulation variants for case-sensitive keyword filters.

Every transform here is a pure function of the input, so the family is fully
deterministic. Non-letters pass through unchanged unless a transform says
otherwise (camelCase drops whitespace, SNAKE turns it into underscores).
"""

from __future__ import annotations

import random

from wafshift.evasions._common import layered
from wafshift.models.types import EvasionLevel

_VOWELS = frozenset("aeiou")
_LEET = {"a": "@", "e": "3", "i": "1", "o": "0", "s": "$"}


def alternating(text: str, start_upper: bool = False) -> str:
    """Alternate case across letters only, skipping everything else."""
    out: list[str] = []
    upper = start_upper
    for ch in text:
        if ch.isalpha():
            out.append(ch.upper() if upper else ch.lower())
            upper = not upper
        else:
            out.append(ch)
    return "".join(out)


def ratio_case(text: str, ratio: float) -> str:
    """Flip the case of letters at even positions, up to ``len * ratio`` flips."""
    budget = int(len(text) * ratio)
    flipped = 0
    out: list[str] = []
    for i, ch in enumerate(text):
        if ch.isalpha() and flipped < budget and i % 2 == 0:
            out.append(ch.upper() if ch.islower() else ch.lower())
            flipped += 1
        else:
            out.append(ch)
    return "".join(out)


def _upper_at(text: str, index: int | None) -> str:
    if index is None:
        return text
    return text[:index] + text[index].upper() + text[index + 1:]


def _first_letter(text: str) -> str:
    return _upper_at(text, next((i for i, ch in enumerate(text) if ch.isalpha()), None))


def _last_letter(text: str) -> str:
    return _upper_at(
        text,
        next((i for i in range(len(text) - 1, -1, -1) if text[i].isalpha()), None),
    )


def word_boundary(text: str) -> str:
    out: list[str] = []
    word_start = True
    for ch in text:
        if ch.isalpha():
            out.append(ch.upper() if word_start else ch.lower())
            word_start = False
        else:
            out.append(ch)
            if ch.isspace():
                word_start = True
    return "".join(out)


def _vowels_upper(text: str) -> str:
    return "".join(ch.upper() if ch.lower() in _VOWELS else ch.lower() for ch in text)


def _consonants_upper(text: str) -> str:
    return "".join(
        ch.upper() if ch.isalpha() and ch.lower() not in _VOWELS else ch.lower()
        for ch in text
    )


def _camel(text: str) -> str:
    out: list[str] = []
    word_start = False
    for ch in text:
        if ch.isalpha():
            out.append(ch.upper() if word_start else ch.lower())
            word_start = False
        elif ch.isspace():
            word_start = True
        else:
            out.append(ch)
    return "".join(out)


def _snake_upper(text: str) -> str:
    return "".join("_" if ch.isspace() else ch.upper() for ch in text)


def _title_cycle(text: str) -> str:
    cycle = (str.upper, str.lower, str.title)
    return "".join(
        cycle[i % 3](ch) if ch.isalpha() else ch for i, ch in enumerate(text)
    )


def _leet(text: str) -> str:
    out: list[str] = []
    for i, ch in enumerate(text):
        low = ch.lower()
        if low in _LEET:
            out.append(_LEET[low] if i % 2 == 0 else ch.upper())
        elif ch.isalpha():
            out.append(ch.lower() if i % 2 == 0 else ch.upper())
        else:
            out.append(ch)
    return "".join(out)


def _word_cycle(text: str) -> str:
    cycle = (str.upper, str.lower, word_boundary, alternating)
    return " ".join(cycle[i % 4](word) for i, word in enumerate(text.split()))


def _every_third(text: str) -> str:
    out: list[str] = []
    letters = 0
    for ch in text:
        if ch.isalpha():
            out.append(ch.upper() if letters % 3 == 0 else ch.lower())
            letters += 1
        else:
            out.append(ch)
    return "".join(out)


def _basic(payload: str, rng: random.Random) -> list[str]:
    return [
        alternating(payload),
        ratio_case(payload, 0.5),
        _first_letter(payload),
        _last_letter(payload),
        word_boundary(payload),
    ]


def _medium(payload: str, rng: random.Random) -> list[str]:
    return [
        ratio_case(payload, 0.3),
        ratio_case(payload, 0.7),
        _vowels_upper(payload),
        _consonants_upper(payload),
        payload.swapcase(),
        _camel(payload),
        _snake_upper(payload),
    ]


def _advanced(payload: str, rng: random.Random) -> list[str]:
    return [
        _title_cycle(payload),
        _leet(payload),
        alternating(payload),
        alternating(payload, start_upper=True),
        _word_cycle(payload),
        _every_third(payload),
    ]


def mixed_case_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
