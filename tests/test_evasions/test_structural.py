"""Tests for command and path obfuscators (randomized, so mostly shape checks)."""

from __future__ import annotations

import base64
import random

from wafshift.evasions.path_traversal import (
    null_byte_variants,
    path_traversal_variants,
    rewrite,
)
from wafshift.evasions.unix_cmd import unix_cmd_variants
from wafshift.evasions.windows_cmd import windows_cmd_variants
from wafshift.models.types import EvasionLevel


class TestUnixCmd:
    def test_basic_returns_variants(self, rng):
        variants = unix_cmd_variants("cat /etc/passwd", EvasionLevel.BASIC, rng)
        assert 1 <= len(variants) <= 9

    def test_base64_pipe_decodes_to_payload(self, rng):
        variants = unix_cmd_variants("cat /etc/passwd", EvasionLevel.ADVANCED, rng)
        piped = [v for v in variants if v.endswith("| base64 -d | bash")]
        assert len(piped) == 1
        encoded = piped[0].split()[1]
        assert base64.b64decode(encoded).decode() == "cat /etc/passwd"

    def test_same_seed_same_output(self):
        a = unix_cmd_variants("id", EvasionLevel.ADVANCED, random.Random(5))
        b = unix_cmd_variants("id", EvasionLevel.ADVANCED, random.Random(5))
        assert a == b

    def test_payload_survives_in_some_form(self, rng):
        variants = unix_cmd_variants("whoami", EvasionLevel.MEDIUM, rng)
        assert any("whoami" in v for v in variants)


class TestWindowsCmd:
    def test_powershell_encoded_is_utf16le(self, rng):
        variants = windows_cmd_variants("whoami /all", EvasionLevel.ADVANCED, rng)
        encoded = [v for v in variants if v.startswith("powershell -e ")]
        assert len(encoded) == 1
        raw = base64.b64decode(encoded[0].removeprefix("powershell -e "))
        assert raw.decode("utf-16-le") == "whoami /all"

    def test_char_codes(self, rng):
        variants = windows_cmd_variants("dir C:\\", EvasionLevel.ADVANCED, rng)
        assert any("[char[]](100,105,114)" in v for v in variants)

    def test_levels_grow(self):
        basic = windows_cmd_variants("net user", EvasionLevel.BASIC, random.Random(3))
        advanced = windows_cmd_variants("net user", EvasionLevel.ADVANCED, random.Random(3))
        assert len(advanced) > len(basic)


class TestPathTraversal:
    def test_rewrite_replaces_dot_segments(self):
        assert rewrite("../../etc/passwd", lambda: "%2e%2e") == "%2e%2e/%2e%2e/etc/passwd"

    def test_rewrite_custom_separator(self):
        assert rewrite("../a", lambda: "..", slash=lambda: "\\") == "..\\a"

    def test_null_byte_variants(self):
        variants = null_byte_variants("../etc/passwd")
        assert "../etc/passwd%00" in variants
        assert "../etc/passwd%00.jpg" in variants

    def test_basic_includes_null_bytes(self, rng):
        variants = path_traversal_variants("../../etc/passwd", EvasionLevel.BASIC, rng)
        assert "../../etc/passwd%00" in variants

    def test_advanced_is_larger(self):
        basic = path_traversal_variants("../../etc/passwd", EvasionLevel.BASIC, random.Random(9))
        advanced = path_traversal_variants(
            "../../etc/passwd", EvasionLevel.ADVANCED, random.Random(9),
        )
        assert len(advanced) > len(basic)
