"""Plain-text WAF analysis report rendered with Jinja2."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from wafshift.core.adaptive import recommend
from wafshift.fingerprint.engine import is_security_header
from wafshift.models.fingerprint import WafFingerprint

TEMPLATES_DIR = Path(__file__).parent / "templates"

_BEHAVIOR_LABELS = {
    "blocks_basic_xss": "Blocks basic XSS",
    "blocks_basic_sqli": "Blocks basic SQLi",
    "blocks_command_injection": "Blocks command injection",
    "has_rate_limiting": "Has rate limiting",
    "custom_error_pages": "Custom error pages",
    "javascript_challenge": "JavaScript challenge",
}


def generate_waf_report(fingerprint: WafFingerprint, generated: datetime | None = None) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.get_template("waf_report.txt.j2")

    flags = fingerprint.behavior.flags
    return template.render(
        fp=fingerprint,
        rule="=" * 64,
        generated=(generated or datetime.now()).isoformat(timespec="seconds"),
        behavior=[(label, flags[key]) for key, label in _BEHAVIOR_LABELS.items()],
        security_headers=sorted(
            (k, v) for k, v in fingerprint.headers.items() if is_security_header(k)
        ),
        techniques=[t.value for t in recommend(fingerprint)],
    )
