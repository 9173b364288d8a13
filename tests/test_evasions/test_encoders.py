"""Tests for the byte/character encoders."""

from __future__ import annotations

import base64

from wafshift.evasions._common import unique
from wafshift.evasions.b64 import base64_variants
from wafshift.evasions.best_fit import BEST_FIT, best_fit_variants, fullwidth, substitute_all
from wafshift.evasions.double_url import double_url_variants
from wafshift.evasions.hexadecimal import hex_variants
from wafshift.evasions.html import html_variants
from wafshift.evasions.mixed_case import alternating, mixed_case_variants, word_boundary
from wafshift.evasions.octal import octal_variants
from wafshift.evasions.unicode import unicode_variants
from wafshift.evasions.url import force_encode, manual_encode, partial_encode, url_variants
from wafshift.evasions.utf8 import utf8_variants
from wafshift.models.types import EvasionLevel

XSS = "<script>alert(1)</script>"


class TestBase64:
    def test_standard_and_unpadded(self):
        variants = base64_variants("ab", EvasionLevel.BASIC)
        assert variants[0] == "YWI="
        assert "YWI" in variants

    def test_sqli_medium_forms(self):
        variants = base64_variants("1 == 1", EvasionLevel.MEDIUM)
        std = base64.b64encode(b"1 == 1").decode()
        assert std == "MSA9PSAx"
        assert std in variants
        assert std + "=" in variants
        assert std + "===" in variants

    def test_advanced_double_encoding(self):
        variants = base64_variants("abc", EvasionLevel.ADVANCED)
        once = base64.b64encode(b"abc")
        assert base64.b64encode(once).decode() in variants
        assert base64.b64encode(b"cba").decode() in variants

    def test_urlsafe_alphabet(self):
        variants = base64_variants("\xff\xfe?>", EvasionLevel.BASIC)
        assert any("-" in v or "_" in v for v in variants)


class TestHtml:
    def test_decimal_and_named_entities(self):
        variants = html_variants(XSS, EvasionLevel.BASIC)
        assert any(v.startswith("&#60;") for v in variants)
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in variants

    def test_hex_entities(self):
        variants = html_variants("<", EvasionLevel.BASIC)
        assert "&#x3c;" in variants
        assert "&#X3C;" in variants

    def test_medium_adds_from_char_code(self):
        variants = html_variants("ab", EvasionLevel.MEDIUM)
        assert "javascript:String.fromCharCode(97,98)" in variants
        assert "&#97&#98" in variants

    def test_advanced_utf7(self):
        variants = html_variants("<a>", EvasionLevel.ADVANCED)
        assert any(v.startswith('<meta charset="UTF-7">') for v in variants)


class TestHex:
    def test_basic_non_empty(self):
        assert hex_variants("id", EvasionLevel.BASIC)

    def test_contains_backslash_escapes(self):
        variants = hex_variants("A", EvasionLevel.BASIC)
        assert any("41" in v for v in variants)


class TestOctal:
    def test_escape_forms(self):
        variants = octal_variants("A", EvasionLevel.BASIC)
        assert any("101" in v for v in variants)


class TestUnicode:
    def test_full_escape(self):
        variants = unicode_variants("<a", EvasionLevel.BASIC)
        assert "\\u003C\\u0061" in variants

    def test_medium_keeps_alphanumerics(self):
        basic = unicode_variants("a<", EvasionLevel.BASIC)
        medium = unicode_variants("a<", EvasionLevel.MEDIUM)
        added = [v for v in medium if v not in basic]
        assert added
        assert any(v.startswith("a") for v in added)


class TestUrl:
    def test_manual_encode_keeps_unreserved(self):
        assert manual_encode("a-b_c.~<") == "a-b_c.~%3c"
        assert manual_encode("<", upper=True) == "%3C"

    def test_force_encode(self):
        assert force_encode("ab") == "%61%62"

    def test_basic_forms(self):
        variants = url_variants("<a b>", EvasionLevel.BASIC)
        assert "%3Ca+b%3E" in variants
        assert "%3Ca%20b%3E" in variants
        assert "%3ca%20b%3e" in variants

    def test_alphanumeric_payload_gets_forced_forms(self):
        variants = url_variants("abc", EvasionLevel.BASIC)
        assert "%61%62%63" in variants

    def test_advanced_double_query(self):
        variants = url_variants("<", EvasionLevel.ADVANCED)
        assert "%253C" in variants

    def test_partial_encode_keeps_multibyte_sequences_whole(self):
        assert partial_encode("h\u00e9llo", 0.5) == "h%c3%a9llo"
        assert partial_encode("h\u00e9llo", 0.0) == "h%c3%a9llo"

    def test_non_ascii_medium_forms(self):
        variants = url_variants("h\u00e9llo", EvasionLevel.MEDIUM)
        assert "h%c3%a9llo" in variants
        assert all(v.isascii() for v in variants)


class TestDoubleUrl:
    def test_basic_double_encoding(self):
        variants = double_url_variants("<", EvasionLevel.BASIC)
        assert "%253C" in variants

    def test_advanced_triple_encoding(self):
        variants = double_url_variants("<", EvasionLevel.ADVANCED)
        assert "%25253C" in variants

    def test_non_ascii_payload(self):
        variants = double_url_variants("h\u00e9llo", EvasionLevel.ADVANCED)
        assert "h%25c3%25a9llo" in variants


class TestMixedCase:
    def test_alternating_skips_non_letters(self):
        assert alternating("a-b-c") == "a-B-c"
        assert alternating("abc", start_upper=True) == "AbC"

    def test_word_boundary(self):
        assert word_boundary("union select") == "Union Select"

    def test_basic(self):
        variants = mixed_case_variants("select", EvasionLevel.BASIC)
        assert "sElEcT" in variants
        assert "Select" in variants

    def test_medium_swapcase(self):
        variants = mixed_case_variants("Select", EvasionLevel.MEDIUM)
        assert "sELECT" in variants


class TestUtf8:
    def test_byte_forms(self):
        variants = utf8_variants("<", EvasionLevel.BASIC)
        assert "\\x3c" in variants
        assert "\\074" in variants
        assert "%3C" in variants or "%3c" in variants

    def test_overlong(self):
        variants = utf8_variants("<", EvasionLevel.MEDIUM)
        assert "\\xc0\\xbc" in variants

    def test_advanced_fullwidth(self):
        variants = utf8_variants("<a>", EvasionLevel.ADVANCED)
        assert "＜ａ＞" in variants


class TestBestFit:
    def test_substitute_all_replaces_every_occurrence(self):
        out = substitute_all("aa", {"a": "xy"})
        assert out == ["xx", "yy"]

    def test_basic_uses_table(self):
        variants = best_fit_variants("a", EvasionLevel.BASIC)
        assert variants == unique(BEST_FIT["a"])

    def test_fullwidth_fallback(self):
        assert best_fit_variants("<1>", EvasionLevel.BASIC) == ["＜１＞"]

    def test_fullwidth(self):
        assert fullwidth("A<") == "Ａ＜"
