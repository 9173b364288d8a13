"""Library-wide properties that hold for every technique."""

from __future__ import annotations

import random

import pytest

from wafshift.errors import UnknownTechniqueError
from wafshift.evasions import TECHNIQUES, apply, get_technique
from wafshift.models.types import Category, EvasionLevel, TechniqueId

PAYLOADS = (
    "<script>alert(1)</script>",
    "' OR 1=1 --",
    "../../etc/passwd",
    "cat /etc/passwd",
    "héllo wörld",
)

ALL_TECHNIQUES = list(TECHNIQUES.values())


@pytest.mark.parametrize("technique", ALL_TECHNIQUES, ids=lambda t: t.id.value)
@pytest.mark.parametrize("payload", PAYLOADS)
class TestEveryTechnique:
    def test_levels_are_monotonic(self, technique, payload):
        basic = technique(payload, EvasionLevel.BASIC, random.Random(42))
        medium = technique(payload, EvasionLevel.MEDIUM, random.Random(42))
        advanced = technique(payload, EvasionLevel.ADVANCED, random.Random(42))
        assert set(basic) <= set(medium) <= set(advanced)
        assert medium[: len(basic)] == basic

    def test_no_duplicates_or_empties(self, technique, payload):
        variants = technique(payload, EvasionLevel.ADVANCED, random.Random(7))
        assert len(variants) == len(set(variants))
        assert "" not in variants


@pytest.mark.parametrize("technique", ALL_TECHNIQUES, ids=lambda t: t.id.value)
def test_empty_payload_gives_nothing(technique):
    for level in EvasionLevel:
        assert technique("", level) == []


@pytest.mark.parametrize(
    "technique",
    [t for t in ALL_TECHNIQUES if t.deterministic],
    ids=lambda t: t.id.value,
)
def test_deterministic_techniques_are_stable(technique):
    first = technique("<svg onload=alert(1)>", EvasionLevel.ADVANCED)
    second = technique("<svg onload=alert(1)>", EvasionLevel.ADVANCED)
    assert first == second


@pytest.mark.parametrize(
    "technique",
    [t for t in ALL_TECHNIQUES if t.category == Category.ENCODER],
    ids=lambda t: t.id.value,
)
def test_encoders_handle_alphanumeric_input(technique):
    assert technique("abc123", EvasionLevel.BASIC)


@pytest.mark.parametrize("technique", ALL_TECHNIQUES, ids=lambda t: t.id.value)
@pytest.mark.parametrize("payload", ["h\u00e9llo w\u00f6rld", "<b>\u00fcber</b>", "caf\u00e9 ' OR 1=1"])
def test_non_ascii_variants_are_valid_text(technique, payload):
    for variant in technique(payload, EvasionLevel.ADVANCED, random.Random(5)):
        assert not any("\ud800" <= ch <= "\udfff" for ch in variant)
        variant.encode("utf-8")


class TestLookup:
    def test_lookup_by_name(self):
        assert get_technique("base64").id == TechniqueId.BASE64
        assert get_technique("Base64Variants").id == TechniqueId.BASE64

    def test_reserved_identifier_is_not_implemented(self):
        with pytest.raises(UnknownTechniqueError):
            get_technique(TechniqueId.XSS)

    def test_unknown_name(self):
        with pytest.raises(UnknownTechniqueError):
            apply("rot13", "x", EvasionLevel.BASIC)

    def test_apply(self):
        assert apply(TechniqueId.BASE64, "ab", EvasionLevel.BASIC)[0] == "YWI="
