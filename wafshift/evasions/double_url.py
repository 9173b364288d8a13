"""Double (and triple) URL encoding built on top of the single-pass URL forms."""

from __future__ import annotations

import random
from urllib.parse import quote, quote_plus

from wafshift.evasions._common import layered
from wafshift.evasions.url import basic_forms, force_encode, manual_encode, medium_forms
from wafshift.models.types import EvasionLevel


def _query(text: str) -> str:
    return quote_plus(text, safe="")


def _basic(payload: str, rng: random.Random) -> list[str]:
    variants = [_query(encoded) for encoded in basic_forms(payload)]
    if all(v == payload for v in variants):
        variants.append(_query(force_encode(payload)))
    variants.append(_query(_query(payload)))
    return variants


def _medium(payload: str, rng: random.Random) -> list[str]:
    return [
        _query(manual_encode(payload)),
        _query(quote(payload)),
    ]


def _advanced(payload: str, rng: random.Random) -> list[str]:
    variants = [_query(_query(_query(payload)))]
    for single in basic_forms(payload) + medium_forms(payload):
        variants.append(_query(single))
        variants.append(quote(single, safe=""))
    return variants


def double_url_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
