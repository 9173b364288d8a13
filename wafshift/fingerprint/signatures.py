"""Static WAF signature table and probe payloads.

Patterns are regular expressions matched case-insensitively. Header
patterns only count when the header is present on the baseline response.
"""

from __future__ import annotations

from dataclasses import dataclass

from wafshift.models.types import WafType

# ---------------------------------------------------------------------------
# Structured WAF signature
# ---------------------------------------------------------------------------

ANY = r".+"


@dataclass(frozen=True, slots=True)
class WafSignature:
    """Detection patterns for a single WAF product."""

    waf_type: WafType
    headers: tuple[tuple[str, str], ...] = ()  # (header name, value regex)
    content: tuple[str, ...] = ()
    status_codes: tuple[int, ...] = ()
    confidence: float = 0.5

    @property
    def name(self) -> str:
        return self.waf_type.value


# ---------------------------------------------------------------------------
# Signatures, in tie-break order
# ---------------------------------------------------------------------------

WAF_SIGNATURES: tuple[WafSignature, ...] = (
    # --- CDN-fronted cloud WAFs ---
    WafSignature(
        WafType.CLOUDFLARE,
        headers=(
            ("Server", r"cloudflare"),
            ("CF-Ray", ANY),
            ("CF-Cache-Status", ANY),
        ),
        content=(r"cloudflare", r"attention required", r"ray id"),
        status_codes=(403, 503),
        confidence=0.9,
    ),
    WafSignature(
        WafType.AWS,
        headers=(
            ("Server", r"awselb|cloudfront"),
            ("X-Amzn-RequestId", ANY),
            ("X-Amz-Cf-Id", ANY),
        ),
        content=(r"aws", r"request blocked"),
        status_codes=(403,),
        confidence=0.8,
    ),
    # --- Module / appliance WAFs ---
    WafSignature(
        WafType.MODSECURITY,
        headers=(("Server", r"mod_security|modsecurity"),),
        content=(r"mod_security|modsecurity", r"not acceptable", r"blocked by.*rule"),
        status_codes=(403, 406),
        confidence=0.85,
    ),
    WafSignature(
        WafType.IMPERVA,
        headers=(("X-Iinfo", ANY),),
        content=(r"imperva", r"incapsula"),
        status_codes=(403,),
        confidence=0.9,
    ),
    WafSignature(
        WafType.F5_BIGIP,
        headers=(
            ("Server", r"big-?ip|f5"),
            ("X-WA-Info", ANY),
            ("X-Cnection", ANY),  # sic, sent by BIG-IP
        ),
        content=(r"f5|big-?ip", r"the requested url was rejected"),
        status_codes=(403,),
        confidence=0.85,
    ),
    WafSignature(
        WafType.AKAMAI,
        headers=(
            ("Server", r"akamai"),
            ("Akamai-Ghost-IP", ANY),
            ("X-Akamai-Request-ID", ANY),
        ),
        content=(r"akamai", r"reference.*\d+"),
        status_codes=(403,),
        confidence=0.9,
    ),
    WafSignature(
        WafType.BARRACUDA,
        content=(r"barracuda", r"blocked.*barracuda"),
        status_codes=(403,),
        confidence=0.8,
    ),
    # --- Hosted site firewalls ---
    WafSignature(
        WafType.SUCURI,
        headers=(
            ("Server", r"sucuri"),
            ("X-Sucuri-ID", ANY),
            ("X-Sucuri-Cache", ANY),
        ),
        content=(r"sucuri", r"access denied.*sucuri"),
        status_codes=(403,),
        confidence=0.9,
    ),
)


# ---------------------------------------------------------------------------
# Probes and scoring constants
# ---------------------------------------------------------------------------

PROBE_PAYLOADS: tuple[str, ...] = (
    "<script>alert('XSS')</script>",
    "' OR 1=1 --",
    "' UNION SELECT 1,2,3 --",
    "../../../etc/passwd",
    "; cat /etc/passwd",
    "<img src=x onerror=alert(1)>",
    "javascript:alert(1)",
    "' AND (SELECT COUNT(*) FROM users) > 0 --",
)

PROBE_PARAM = "test"

HEADER_WEIGHT = 0.3
CONTENT_WEIGHT = 0.2
PROBE_CONTENT_WEIGHT = 0.3
STATUS_WEIGHT = 0.2
ACCEPTANCE_THRESHOLD = 0.3

BLOCK_CODES = frozenset({403, 406})

# Substrings; a header is security-related if its lowercased name contains one
SECURITY_HEADERS: tuple[str, ...] = (
    "server",
    "x-powered-by",
    "x-frame-options",
    "x-content-type-options",
    "x-xss-protection",
    "content-security-policy",
    "strict-transport-security",
    "cf-ray",
    "x-amzn-requestid",
    "x-iinfo",
    "x-wa-info",
    "akamai-ghost-ip",
)
