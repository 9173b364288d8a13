"""Tests for the plain-text WAF analysis report."""

from __future__ import annotations

from datetime import datetime

from wafshift.fingerprint.report import generate_waf_report
from wafshift.models.fingerprint import WafBehavior, WafFingerprint
from wafshift.models.types import WafType

WHEN = datetime(2024, 5, 1, 12, 30, 0)


def _fingerprint(**kwargs):
    defaults = {
        "waf_type": WafType.CLOUDFLARE,
        "confidence": 0.85,
        "evidence": ["Header match: Server"],
        "headers": {"Server": "cloudflare", "Content-Length": "12", "CF-Ray": "8a1b"},
        "response_codes": [200, 403, 403],
        "behavior": WafBehavior(blocks_basic_xss=True, response_codes=[403, 403]),
        "target_url": "https://target.example/",
    }
    defaults.update(kwargs)
    return WafFingerprint(**defaults)


class TestWafReport:
    def test_header_block(self):
        report = generate_waf_report(_fingerprint(), WHEN)
        assert report.startswith("WAF ANALYSIS REPORT\n")
        assert "Target:      https://target.example/" in report
        assert "WAF Type:    CloudFlare" in report
        assert "Confidence:  85.0%" in report
        assert "Generated:   2024-05-01T12:30:00" in report

    def test_evidence(self):
        report = generate_waf_report(_fingerprint(), WHEN)
        assert "  * Header match: Server" in report

    def test_behavior(self):
        report = generate_waf_report(_fingerprint(), WHEN)
        assert "  * Blocks basic XSS: True" in report
        assert "  * Blocks basic SQLi: False" in report
        assert "  * Probe status codes: 403, 403" in report
        assert "200, 403" not in report

    def test_only_security_headers_listed(self):
        report = generate_waf_report(_fingerprint(), WHEN)
        section = report.split("SECURITY HEADERS:")[1].split("RECOMMENDED")[0]
        assert "CF-Ray: 8a1b" in section
        assert "Server: cloudflare" in section
        assert "Content-Length" not in section

    def test_recommendations_numbered(self):
        report = generate_waf_report(_fingerprint(), WHEN)
        assert "  1. UnicodeVariants" in report
        assert "  2. MixedCaseVariants" in report
        assert "  4. DoubleURLVariants" in report

    def test_unknown_waf(self):
        report = generate_waf_report(WafFingerprint.unknown(), WHEN)
        assert "WAF Type:    Unknown" in report
        assert "Target:      -" in report
        assert report.count("(none)") == 2
        assert "  1. UnicodeVariants" in report
        assert "  2. URLVariants" in report
