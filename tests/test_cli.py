"""Tests for CLI commands via typer.testing.CliRunner."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from wafshift import __version__
from wafshift.cli import app
from wafshift.errors import BaselineRequestError
from wafshift.models.fingerprint import WafFingerprint
from wafshift.models.types import WafType
from wafshift.output.writer import DETAILED_FILE, JSONL_FILE, SIMPLE_FILE

runner = CliRunner()


def _generate(tmp_path, *args):
    return runner.invoke(app, [
        "generate", *args,
        "-o", str(tmp_path / "out"),
        "--config", str(tmp_path / "missing.yaml"),
    ])


class TestVersionCommand:
    def test_version_output(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "Usage" in result.output or "wafshift" in result.output.lower()


class TestDetectCommand:
    def test_detect_xss(self):
        result = runner.invoke(app, ["detect", "<script>alert(1)</script>"])
        assert result.exit_code == 0
        assert result.output.strip() == "xss"

    def test_detect_generic(self):
        result = runner.invoke(app, ["detect", "hello"])
        assert result.output.strip() == "generic"


class TestTechniquesCommand:
    def test_lists_everything(self):
        result = runner.invoke(app, ["techniques"])
        assert result.exit_code == 0
        assert "Attack Types" in result.output
        assert "Techniques" in result.output

    def test_filter(self):
        result = runner.invoke(app, ["techniques", "--attack", "xss"])
        assert result.exit_code == 0

    def test_bad_filter(self):
        result = runner.invoke(app, ["techniques", "--attack", "rce"])
        assert result.exit_code == 2


class TestGenerateCommand:
    def test_writes_output_files(self, tmp_path):
        result = _generate(tmp_path, "<script>alert(1)</script>", "-a", "xss", "-l", "basic")
        assert result.exit_code == 0, result.output
        assert "Done!" in result.output
        out = tmp_path / "out"
        for name in (DETAILED_FILE, SIMPLE_FILE, JSONL_FILE):
            assert (out / name).exists()
        assert "## Evasion Type: HTMLVariants" in (out / DETAILED_FILE).read_text(encoding="utf-8")

    def test_explicit_techniques(self, tmp_path):
        result = _generate(tmp_path, "ab", "-t", "base64", "-l", "basic")
        assert result.exit_code == 0, result.output
        simple = (tmp_path / "out" / SIMPLE_FILE).read_text(encoding="utf-8")
        assert simple.splitlines()[0] == "YWI="

    def test_payload_file(self, tmp_path):
        source = tmp_path / "in.txt"
        source.write_text("# list\n../etc/passwd\n", encoding="utf-8")
        result = _generate(tmp_path, "-f", str(source), "-l", "basic", "-m", "paths")
        assert result.exit_code == 0, result.output
        detailed = (tmp_path / "out" / DETAILED_FILE).read_text(encoding="utf-8")
        assert "## Evasion Type: PathTraversalVariants" in detailed
        assert "## Attack Type: path" in detailed

    def test_bad_attack_type(self, tmp_path):
        result = _generate(tmp_path, "x", "-a", "rce")
        assert result.exit_code == 2
        assert "Error" in result.output

    def test_bad_level(self, tmp_path):
        assert _generate(tmp_path, "x", "-l", "extreme").exit_code == 2

    def test_bad_method(self, tmp_path):
        assert _generate(tmp_path, "x", "-m", "magic").exit_code == 2

    def test_unknown_technique(self, tmp_path):
        result = _generate(tmp_path, "x", "-t", "XSSVariants")
        assert result.exit_code == 2

    def test_undecodable_payload_is_written_escaped(self, tmp_path):
        result = _generate(tmp_path, "ab\udcff", "-a", "xss", "-l", "basic", "-t", "hex")
        assert result.exit_code == 0, result.output
        detailed = (tmp_path / "out" / DETAILED_FILE).read_text(encoding="utf-8")
        assert "## Original Payload: ab\\udcff\n" in detailed
        assert detailed.rstrip().endswith("---")

    def test_configured_fingerprint_with_techniques(self, tmp_path):
        config = tmp_path / "c.yaml"
        config.write_text(
            "target:\n  url: https://t/\n  fingerprint: true\n", encoding="utf-8",
        )
        fp = WafFingerprint(waf_type=WafType.AWS, confidence=0.7)
        with patch(
            "wafshift.core.engine.EvasionEngine.fingerprint", AsyncMock(return_value=fp),
        ) as mocked:
            result = runner.invoke(app, [
                "generate", "ab", "-t", "base64", "-l", "basic",
                "-o", str(tmp_path / "out"), "--config", str(config),
            ])
        assert result.exit_code == 0, result.output
        mocked.assert_awaited_once_with("https://t/")
        detailed = (tmp_path / "out" / DETAILED_FILE).read_text(encoding="utf-8")
        assert "# WAF: AWS WAF (70%)" in detailed

    def test_missing_payload_file(self, tmp_path):
        result = _generate(tmp_path, "-f", str(tmp_path / "nope.txt"))
        assert result.exit_code == 1


class TestFingerprintCommand:
    def test_summary(self):
        fp = WafFingerprint(
            waf_type=WafType.CLOUDFLARE, confidence=0.9, evidence=["Header match: Server"],
        )
        with patch(
            "wafshift.core.engine.EvasionEngine.fingerprint", AsyncMock(return_value=fp),
        ):
            result = runner.invoke(app, ["fingerprint", "https://target.example/"])
        assert result.exit_code == 0
        assert "CloudFlare" in result.output
        assert "Header match: Server" in result.output

    def test_report(self):
        fp = WafFingerprint(waf_type=WafType.AWS, confidence=0.7)
        with patch(
            "wafshift.core.engine.EvasionEngine.fingerprint", AsyncMock(return_value=fp),
        ):
            result = runner.invoke(app, ["fingerprint", "https://t/", "--report"])
        assert result.exit_code == 0
        assert "WAF ANALYSIS REPORT" in result.output
        assert "AWS WAF" in result.output

    def test_unreachable_target(self):
        err = BaselineRequestError("https://t/", "connection refused")
        with patch(
            "wafshift.core.engine.EvasionEngine.fingerprint", AsyncMock(side_effect=err),
        ):
            result = runner.invoke(app, ["fingerprint", "https://t/"])
        assert result.exit_code == 1
        assert "connection refused" in result.output
