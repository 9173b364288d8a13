"""Tests for WAF fingerprinting with a mocked HTTP client."""

from __future__ import annotations

from unittest.mock import AsyncMock

import aiohttp
import pytest

from wafshift.errors import BaselineRequestError
from wafshift.fingerprint.engine import (
    ProbeResponse,
    WafFingerprinter,
    is_security_header,
)
from wafshift.fingerprint.signatures import PROBE_PAYLOADS, WAF_SIGNATURES, WafSignature
from wafshift.models.types import WafType

URL = "https://target.example/"


def _make_resp(status=200, body="", headers=None):
    """Create a mock HTTP response."""
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=body)
    resp.headers = dict(headers or {})
    return resp


def _make_http(baseline, probe=None):
    """Client returning ``baseline`` for the bare URL and ``probe`` for probes.

    Either side may be an exception instance or a callable taking the URL.
    """
    async def get(url, **kwargs):
        target = baseline if url == URL else probe
        if callable(target) and not isinstance(target, AsyncMock):
            target = target(url)
        if isinstance(target, Exception):
            raise target
        return target

    http = AsyncMock()
    http.get = AsyncMock(side_effect=get)
    return http


def _probe(status=200, body="", payload="x"):
    return ProbeResponse(status=status, headers={}, body=body, payload=payload)


class TestProbeResponse:
    def test_header_lookup_is_case_insensitive(self):
        resp = ProbeResponse(status=200, headers={"CF-Ray": "abc"}, body="")
        assert resp.header("cf-ray") == "abc"
        assert resp.header("Server") is None

    def test_security_headers(self):
        assert is_security_header("Strict-Transport-Security")
        assert is_security_header("X-Amzn-RequestId")
        assert not is_security_header("Content-Length")


class TestFingerprint:
    async def test_cloudflare_block_page(self):
        http = _make_http(
            _make_resp(200, "<html>welcome</html>", {"Server": "cloudflare"}),
            _make_resp(403, "<title>Attention Required! | Cloudflare</title>"),
        )
        fp = await WafFingerprinter(http).fingerprint(URL)

        assert fp.waf_type == WafType.CLOUDFLARE
        assert fp.detected
        assert fp.confidence >= 0.3
        assert fp.confidence <= 1.0
        assert "Header match: Server" in fp.evidence
        assert "Status code match: 403" in fp.evidence
        assert fp.evidence[-1] == "Server header: cloudflare"
        assert fp.target_url == URL
        assert fp.response_codes == [200] + [403] * len(PROBE_PAYLOADS)

    async def test_evidence_is_not_repeated(self):
        http = _make_http(
            _make_resp(200, "ok", {"Server": "cloudflare"}),
            _make_resp(403, "Attention Required"),
        )
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert len(fp.evidence) == len(set(fp.evidence))

    async def test_probes_sent_as_query_param(self):
        http = _make_http(_make_resp(200, "ok"), _make_resp(200, "ok"))
        await WafFingerprinter(http, timeout=2.5).fingerprint(URL)

        urls = [c.args[0] for c in http.get.await_args_list]
        assert urls[0] == URL
        assert len(urls) == 1 + len(PROBE_PAYLOADS)
        assert all("?test=" in u for u in urls[1:])
        assert all(c.kwargs["timeout"] == 2.5 for c in http.get.await_args_list)

    async def test_nothing_matches(self):
        http = _make_http(_make_resp(200, "hello"), _make_resp(200, "hello"))
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert fp.waf_type == WafType.UNKNOWN
        assert not fp.detected
        assert fp.confidence == 0.0
        assert fp.evidence == []

    async def test_weak_match_stays_unknown(self):
        # One baseline content hit: 0.2 * 0.9 is under the threshold
        http = _make_http(_make_resp(200, "protected by sucuri"), _make_resp(200, "hello"))
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert fp.waf_type == WafType.UNKNOWN
        assert fp.confidence == pytest.approx(0.18)
        assert fp.confidence <= 0.3
        assert fp.evidence == []

    async def test_nginx_heuristic(self):
        http = _make_http(
            _make_resp(200, "hello", {"Server": "nginx/1.25.3"}),
            _make_resp(200, "hello"),
        )
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert fp.waf_type == WafType.NGINX
        assert fp.confidence == pytest.approx(0.6)
        assert fp.evidence == ["Server header: nginx/1.25.3"]

    async def test_rate_limiting(self):
        http = _make_http(_make_resp(200, "hello"), _make_resp(429, "slow down"))
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert fp.behavior.has_rate_limiting
        assert "Rate limiting detected" in fp.evidence

    async def test_baseline_failure(self):
        http = _make_http(aiohttp.ClientConnectionError("refused"), _make_resp(200, "ok"))
        with pytest.raises(BaselineRequestError) as exc_info:
            await WafFingerprinter(http).fingerprint(URL)
        assert exc_info.value.url == URL
        assert "refused" in str(exc_info.value)

    async def test_baseline_timeout(self):
        http = _make_http(TimeoutError(), _make_resp(200, "ok"))
        with pytest.raises(BaselineRequestError, match="TimeoutError"):
            await WafFingerprinter(http).fingerprint(URL)

    async def test_failed_probes_are_skipped(self):
        def probe(url):
            if "UNION" in url:
                return aiohttp.ServerDisconnectedError()
            return _make_resp(403, "blocked")

        http = _make_http(_make_resp(200, "ok"), probe)
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert len(fp.response_codes) == len(PROBE_PAYLOADS)
        assert len(fp.behavior.response_codes) == len(PROBE_PAYLOADS) - 1

    async def test_headers_recorded(self):
        http = _make_http(
            _make_resp(200, "hello", {"X-Frame-Options": "DENY"}),
            _make_resp(200, "hello"),
        )
        fp = await WafFingerprinter(http).fingerprint(URL)
        assert fp.headers == {"X-Frame-Options": "DENY"}


class TestScoring:
    def test_header_requires_presence(self):
        cloudflare = WAF_SIGNATURES[0]
        baseline = ProbeResponse(status=200, headers={"CF-Ray": "8a1b2c"}, body="")
        scored = WafFingerprinter.score_signature(cloudflare, baseline, [])
        assert scored.score == pytest.approx(0.3 * 0.9)
        assert scored.evidence == ["Header match: CF-Ray"]

    def test_probe_status_and_content(self):
        aws = next(s for s in WAF_SIGNATURES if s.waf_type == WafType.AWS)
        baseline = ProbeResponse(status=200, headers={}, body="")
        probes = [_probe(403, "Request blocked")]
        scored = WafFingerprinter.score_signature(aws, baseline, probes)
        assert scored.score == pytest.approx((0.3 + 0.2) * 0.8)

    def test_tie_goes_to_first_signature(self):
        first = WafSignature(WafType.SUCURI, content=("shield",), confidence=0.5)
        second = WafSignature(WafType.BARRACUDA, content=("shield",), confidence=0.5)
        fingerprinter = WafFingerprinter(AsyncMock(), signatures=[first, second])
        best = fingerprinter.best_match(_probe(200, "shield"), [])
        assert best.signature is first

    def test_no_signatures(self):
        fingerprinter = WafFingerprinter(AsyncMock(), signatures=[])
        assert fingerprinter.best_match(_probe(), []) is None


class TestBehavior:
    def test_block_flags_come_from_blocked_bodies(self):
        baseline = _probe(200, "home")
        probes = [
            _probe(403, "XSS attempt blocked"),
            _probe(406, "SQL injection detected"),
        ]
        behavior = WafFingerprinter.analyze_behavior(baseline, probes)
        assert behavior.blocks_basic_xss
        assert behavior.blocks_basic_sqli
        assert behavior.blocks_command_injection  # "injection"
        assert behavior.response_codes == [403, 406]

    def test_same_status_as_baseline_is_not_a_block(self):
        behavior = WafFingerprinter.analyze_behavior(
            _probe(403, "home"), [_probe(403, "script blocked")],
        )
        assert not behavior.blocks_basic_xss

    def test_challenge_and_error_pages(self):
        behavior = WafFingerprinter.analyze_behavior(
            _probe(200, "home"),
            [_probe(503, "Checking your browser... JavaScript required" + "x" * 1200)],
        )
        assert behavior.javascript_challenge
        assert behavior.custom_error_pages
        assert not behavior.has_rate_limiting

    def test_many_503s_mean_rate_limiting(self):
        probes = [_probe(503, "busy")] * 3
        assert WafFingerprinter.analyze_behavior(_probe(), probes).has_rate_limiting
        assert not WafFingerprinter.analyze_behavior(_probe(), probes[:2]).has_rate_limiting
