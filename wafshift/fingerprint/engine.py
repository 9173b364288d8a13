"""WAF fingerprinting — baseline plus probe requests scored against signatures.

One benign baseline request is followed by a fixed set of malicious probes.
Each signature is scored on baseline headers, baseline and probe bodies,
and probe status codes, then weighted by its base confidence. The best
score wins if it clears the acceptance threshold.

A failed baseline aborts the run. A failed probe is skipped.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from wafshift.errors import BaselineRequestError
from wafshift.fingerprint.signatures import (
    ACCEPTANCE_THRESHOLD,
    BLOCK_CODES,
    CONTENT_WEIGHT,
    HEADER_WEIGHT,
    PROBE_CONTENT_WEIGHT,
    PROBE_PARAM,
    PROBE_PAYLOADS,
    SECURITY_HEADERS,
    STATUS_WEIGHT,
    WAF_SIGNATURES,
    WafSignature,
)
from wafshift.models.fingerprint import WafBehavior, WafFingerprint
from wafshift.models.types import WafType
from wafshift.utils.http import with_query_param

logger = logging.getLogger(__name__)

_MAX_BODY = 65536
_ERROR_PAGE_SIZE = 1000
_NGINX_CONFIDENCE = 0.6


# ---------------------------------------------------------------------------
# Lightweight response container (avoids keeping aiohttp objects alive)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ProbeResponse:
    status: int
    headers: dict[str, str]
    body: str
    payload: str = ""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class SignatureScore:
    signature: WafSignature
    score: float = 0.0
    evidence: list[str] = field(default_factory=list)

    def note(self, line: str) -> None:
        if line not in self.evidence:
            self.evidence.append(line)


def _matches(pattern: str, text: str) -> bool:
    return bool(text) and re.search(pattern, text, re.IGNORECASE) is not None


def is_security_header(name: str) -> bool:
    """True for security-relevant or WAF-identifying response headers."""
    lowered = name.lower()
    return any(h in lowered for h in SECURITY_HEADERS)


class WafFingerprinter:
    """Classify the WAF in front of a URL.

    ``http`` is anything with an ``AsyncHttpClient``-compatible ``get``.
    """

    def __init__(
        self,
        http: Any,
        signatures: Sequence[WafSignature] = WAF_SIGNATURES,
        probes: Sequence[str] = PROBE_PAYLOADS,
        timeout: float = 5.0,
    ):
        self.http = http
        self.signatures = tuple(signatures)
        self.probes = tuple(probes)
        self.timeout = timeout

    async def fingerprint(self, url: str) -> WafFingerprint:
        logger.info("Fingerprinting WAF at %s", url)
        try:
            baseline = await self._fetch(url)
        except (aiohttp.ClientError, TimeoutError, OSError) as exc:
            raise BaselineRequestError(url, str(exc) or type(exc).__name__) from exc

        responses: list[ProbeResponse] = []
        for payload in self.probes:
            probe_url = with_query_param(url, PROBE_PARAM, payload)
            try:
                resp = await self._fetch(probe_url, payload)
            except (aiohttp.ClientError, TimeoutError, OSError) as exc:
                logger.debug("Probe %r against %s failed: %s", payload, url, exc)
                continue
            responses.append(resp)

        best = self.best_match(baseline, responses)
        if best is not None and best.score > ACCEPTANCE_THRESHOLD:
            waf_type = best.signature.waf_type
            confidence = min(1.0, best.score)
            evidence = list(best.evidence)
        else:
            waf_type = WafType.UNKNOWN
            confidence = min(best.score if best else 0.0, ACCEPTANCE_THRESHOLD)
            evidence = []

        behavior = self.analyze_behavior(baseline, responses)
        if behavior.has_rate_limiting:
            evidence.append("Rate limiting detected")

        result = WafFingerprint(
            waf_type=waf_type,
            confidence=confidence,
            evidence=evidence,
            headers=dict(baseline.headers),
            response_codes=[baseline.status, *(r.status for r in responses)],
            behavior=behavior,
            target_url=url,
        )
        result = self.apply_heuristics(result, baseline)

        logger.info(
            "WAF fingerprint for %s: %s (%.1f%% confidence)",
            url, result.waf_type, result.confidence * 100,
        )
        return result

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @staticmethod
    def score_signature(
        signature: WafSignature,
        baseline: ProbeResponse,
        probes: Sequence[ProbeResponse],
    ) -> SignatureScore:
        result = SignatureScore(signature)
        raw = 0.0

        for name, pattern in signature.headers:
            value = baseline.header(name)
            if value is not None and _matches(pattern, value):
                raw += HEADER_WEIGHT
                result.note(f"Header match: {name}")

        for pattern in signature.content:
            if _matches(pattern, baseline.body):
                raw += CONTENT_WEIGHT
                result.note(f"Content match: {pattern}")

        for probe in probes:
            for pattern in signature.content:
                if _matches(pattern, probe.body):
                    raw += PROBE_CONTENT_WEIGHT
                    result.note(f"Probe content match: {pattern}")
            if probe.status in signature.status_codes:
                raw += STATUS_WEIGHT
                result.note(f"Status code match: {probe.status}")

        result.score = raw * signature.confidence
        return result

    def best_match(
        self, baseline: ProbeResponse, probes: Sequence[ProbeResponse],
    ) -> SignatureScore | None:
        """Highest-scoring signature; the first one wins a tie."""
        best: SignatureScore | None = None
        for signature in self.signatures:
            scored = self.score_signature(signature, baseline, probes)
            if best is None or scored.score > best.score:
                best = scored
        return best

    # ------------------------------------------------------------------
    # Behavior and heuristics
    # ------------------------------------------------------------------

    @staticmethod
    def analyze_behavior(
        baseline: ProbeResponse, probes: Sequence[ProbeResponse],
    ) -> WafBehavior:
        flags = dict.fromkeys(WafBehavior().flags, False)

        for probe in probes:
            body = probe.body.lower()
            if probe.status != baseline.status and probe.status in BLOCK_CODES:
                if "script" in body or "xss" in body:
                    flags["blocks_basic_xss"] = True
                if "sql" in body or "union" in body:
                    flags["blocks_basic_sqli"] = True
                if "command" in body or "injection" in body:
                    flags["blocks_command_injection"] = True

            if "challenge" in body or "javascript" in body:
                flags["javascript_challenge"] = True
            if probe.status >= 400 and len(probe.body) > _ERROR_PAGE_SIZE:
                flags["custom_error_pages"] = True

        codes = Counter(p.status for p in probes)
        flags["has_rate_limiting"] = codes[429] > 0 or codes[503] > 2

        return WafBehavior(**flags, response_codes=[p.status for p in probes])

    @staticmethod
    def apply_heuristics(fingerprint: WafFingerprint, baseline: ProbeResponse) -> WafFingerprint:
        server = baseline.header("Server")
        if not server:
            return fingerprint

        update: dict[str, Any] = {
            "evidence": [*fingerprint.evidence, f"Server header: {server}"],
        }
        if fingerprint.waf_type == WafType.UNKNOWN and "nginx" in server.lower():
            update["waf_type"] = WafType.NGINX
            update["confidence"] = _NGINX_CONFIDENCE
        return fingerprint.model_copy(update=update)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch(self, url: str, payload: str = "") -> ProbeResponse:
        resp = await self.http.get(url, timeout=self.timeout)
        body = await resp.text(encoding="utf-8", errors="replace")
        return ProbeResponse(
            status=resp.status,
            headers={k: v for k, v in resp.headers.items()},
            body=body[:_MAX_BODY],
            payload=payload,
        )
