"""Tests for variant assembly and the technique failure boundary."""

from __future__ import annotations

import logging
from types import MappingProxyType

import pytest

from wafshift.core.assembly import (
    apply_technique,
    assemble,
    assemble_detailed,
    filter_by_method,
    total_variants,
)
from wafshift.errors import UnknownTechniqueError
from wafshift.evasions import TECHNIQUES, Technique
from wafshift.models.types import Category, EvasionLevel, PayloadMethod, TechniqueId


def _boom(payload, level, rng=None):
    raise RuntimeError("kaboom")


def _broken_table():
    table = dict(TECHNIQUES)
    table[TechniqueId.HEX] = Technique(TechniqueId.HEX, Category.ENCODER, _boom, True)
    return MappingProxyType(table)


class TestAssemble:
    def test_xss_basic_has_entity_forms(self):
        result = assemble("<script>alert(1)</script>", "xss", EvasionLevel.BASIC)
        html = result[TechniqueId.HTML]
        assert any(v.startswith("&#60;") for v in html)
        assert any(v.startswith("&lt;") for v in html)

    def test_sqli_medium_base64(self):
        result = assemble("1 == 1", "sqli", EvasionLevel.MEDIUM)
        b64 = result[TechniqueId.BASE64]
        assert "MSA9PSAx" in b64
        assert "MSA9PSAx=" in b64

    def test_empty_payload(self):
        assert assemble("", "xss", EvasionLevel.ADVANCED) == {}

    def test_filter_keeps_its_order(self):
        order = [TechniqueId.URL, TechniqueId.BASE64]
        result = assemble("<a>", "xss", EvasionLevel.BASIC, order)
        assert list(result) == order

    def test_filter_accepts_names(self):
        result = assemble("<a>", "xss", EvasionLevel.BASIC, ["hex", "hex"])
        assert list(result) == [TechniqueId.HEX]

    def test_unknown_type_uses_fallback(self):
        result = assemble("abc", "weird", EvasionLevel.BASIC)
        assert set(result) == {TechniqueId.BASE64, TechniqueId.HEX, TechniqueId.UNICODE}

    def test_unknown_technique_raises(self):
        with pytest.raises(UnknownTechniqueError):
            assemble("abc", "xss", EvasionLevel.BASIC, ["XSSVariants"])

    def test_total_variants(self):
        result = assemble("<a>", "xss", EvasionLevel.BASIC)
        assert total_variants(result) == sum(len(v) for v in result.values())


class TestFailureBoundary:
    def test_fault_becomes_failed_result(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wafshift.core.assembly"):
            outcome = apply_technique("abc", "hex", EvasionLevel.BASIC, techniques=_broken_table())
        assert outcome.failed
        assert outcome.variants == []
        assert "kaboom" in (outcome.error or "")
        assert "kaboom" in caplog.text

    def test_other_techniques_still_run(self):
        result = assemble_detailed(
            "abc", "generic", EvasionLevel.BASIC,
            [TechniqueId.HEX, TechniqueId.BASE64],
            techniques=_broken_table(),
        )
        assert list(result.variants) == [TechniqueId.BASE64]
        assert len(result.failures) == 1
        assert result.failures[0].technique == TechniqueId.HEX
        assert result.total == len(result.variants[TechniqueId.BASE64])

    def test_assemble_accepts_technique_table(self):
        result = assemble(
            "abc", "generic", EvasionLevel.BASIC,
            [TechniqueId.HEX, TechniqueId.URL],
            techniques=_broken_table(),
        )
        assert list(result) == [TechniqueId.URL]

    def test_non_ascii_payload_has_no_failures(self):
        result = assemble_detailed("h\u00e9llo", "xss", EvasionLevel.ADVANCED)
        assert result.failures == []
        assert TechniqueId.DOUBLE_URL in result.variants

    def test_success_result(self):
        outcome = apply_technique("ab", TechniqueId.BASE64, EvasionLevel.BASIC)
        assert outcome.ok
        assert outcome.variants[0] == "YWI="


class TestFilterByMethod:
    ALL = list(TECHNIQUES)

    def test_auto_keeps_everything(self):
        assert filter_by_method(self.ALL, PayloadMethod.AUTO) == self.ALL

    def test_encodings(self):
        kept = filter_by_method(self.ALL, "encodings")
        assert TechniqueId.UNIX_CMD not in kept
        assert TechniqueId.PATH_TRAVERSAL not in kept
        assert TechniqueId.BASE64 in kept

    def test_paths(self):
        assert filter_by_method(self.ALL, PayloadMethod.PATHS) == [TechniqueId.PATH_TRAVERSAL]

    def test_commands(self):
        assert filter_by_method(self.ALL, PayloadMethod.COMMANDS) == [
            TechniqueId.UNIX_CMD, TechniqueId.WINDOWS_CMD,
        ]
