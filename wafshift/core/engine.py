"""Generation engine — fingerprint, select techniques, assemble variants.

Usage::

    engine = EvasionEngine(Settings.load())
    report = engine.generate(["<script>alert(1)</script>"], AttackType.XSS, EvasionLevel.BASIC)
    report = await engine.run(target_url="https://example.com", fingerprint=True)
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from typing import Any

from wafshift.config import Settings
from wafshift.core.adaptive import prioritize
from wafshift.core.assembly import VariantMap, assemble_detailed, filter_by_method
from wafshift.core.registry import DEFAULT_REGISTRY, TechniqueRegistry
from wafshift.fingerprint.engine import WafFingerprinter
from wafshift.models.fingerprint import WafFingerprint
from wafshift.models.result import GenerationReport
from wafshift.models.types import AttackType, EvasionLevel, PayloadMethod, TechniqueId
from wafshift.utils.http import AsyncHttpClient
from wafshift.utils.payloads import detect_attack_type, load_base_payloads, stream_payloads

logger = logging.getLogger(__name__)


def _cap(variants: VariantMap, limit: int) -> VariantMap:
    """Keep at most ``limit`` variants, earlier techniques first."""
    if limit <= 0:
        return variants
    capped: VariantMap = {}
    remaining = limit
    for technique, items in variants.items():
        if remaining <= 0:
            break
        capped[technique] = items[:remaining]
        remaining -= len(capped[technique])
    return capped


class EvasionEngine:
    """Runs the full generation flow for a batch of payloads."""

    def __init__(
        self,
        settings: Settings | None = None,
        registry: TechniqueRegistry = DEFAULT_REGISTRY,
        http: Any = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or Settings()
        self.registry = registry
        self.http = http
        self.rng = rng

    # ------------------------------------------------------------------
    # Technique selection
    # ------------------------------------------------------------------

    def resolve_techniques(
        self,
        attack_type: AttackType | str,
        fingerprint: WafFingerprint | None = None,
        method: PayloadMethod | str = PayloadMethod.AUTO,
    ) -> list[TechniqueId]:
        """Applicable techniques, reordered for a WAF when one was fingerprinted."""
        if fingerprint is not None:
            techniques = prioritize(fingerprint.waf_type, attack_type, self.registry)
        else:
            techniques = list(self.registry.techniques_or_fallback(attack_type))
        return filter_by_method(techniques, method, self.registry)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self,
        payloads: Iterable[str],
        attack_type: AttackType | str | None = None,
        level: EvasionLevel | str | int = EvasionLevel.MEDIUM,
        techniques: Sequence[TechniqueId | str] | None = None,
        *,
        fingerprint: WafFingerprint | None = None,
        method: PayloadMethod | str | None = None,
    ) -> GenerationReport:
        """Generate variants for every payload.

        With ``attack_type`` unset each payload's type is detected from its
        content. An explicit ``techniques`` list overrides selection entirely.
        """
        level = EvasionLevel.parse(level, strict=True)
        fixed_type = AttackType.parse(attack_type) if attack_type is not None else None
        method = PayloadMethod(method or self.settings.generation.payload_method)
        limit = self.settings.generation.max_variants

        report = GenerationReport(attack_type=fixed_type, level=level, fingerprint=fingerprint)
        used: dict[TechniqueId, None] = {}

        for payload in dict.fromkeys(payloads):
            if not payload:
                continue
            payload_type = fixed_type or detect_attack_type(payload)
            if techniques is not None:
                selected = [TechniqueId.parse(t) for t in techniques]
            else:
                selected = self.resolve_techniques(payload_type, fingerprint, method)

            assembled = assemble_detailed(
                payload, payload_type, level, selected,
                registry=self.registry, rng=self.rng,
            )
            variants = _cap(assembled.variants, limit)
            report.results[payload] = variants
            report.attack_types[payload] = payload_type
            report.failures.extend(assembled.failures)
            used.update(dict.fromkeys(selected))
            logger.debug(
                "Payload %r (%s): %d variants from %d techniques",
                payload[:60], payload_type, sum(len(v) for v in variants.values()), len(variants),
            )

        report.techniques = list(used)
        logger.info(
            "Generated %d variants for %d payloads at level %s",
            report.total_variants, len(report.results), level.label,
        )
        return report

    async def fingerprint(self, url: str) -> WafFingerprint:
        timeout = self.settings.http.probe_timeout
        if self.http is not None:
            return await WafFingerprinter(self.http, timeout=timeout).fingerprint(url)
        async with AsyncHttpClient.from_settings(self.settings.http) as http:
            return await WafFingerprinter(http, timeout=timeout).fingerprint(url)

    async def load_payloads(self) -> list[str]:
        """Payloads from settings: inline list, then file, then bundled lists."""
        gen = self.settings.generation
        if gen.payloads:
            return list(gen.payloads)
        if gen.payload_file is not None:
            return [p async for p in stream_payloads(gen.payload_file)]
        bundled = load_base_payloads(gen.attack_type or AttackType.ALL)
        return [p for items in bundled.values() for p in items]

    async def run(
        self,
        payloads: Iterable[str] | None = None,
        attack_type: AttackType | str | None = None,
        level: EvasionLevel | str | int | None = None,
        target_url: str | None = None,
        fingerprint: bool = False,
        method: PayloadMethod | str | None = None,
    ) -> GenerationReport:
        """Fingerprint (optionally), then generate.

        Arguments left as ``None`` fall back to the settings.
        """
        gen = self.settings.generation
        if payloads is None:
            payloads = await self.load_payloads()
        if attack_type is None:
            attack_type = gen.attack_type
        if level is None:
            level = gen.evasion_level
        target_url = target_url or self.settings.target.url
        fingerprint = fingerprint or self.settings.target.fingerprint

        waf: WafFingerprint | None = None
        if fingerprint and target_url:
            waf = await self.fingerprint(target_url)
        elif fingerprint:
            logger.warning("Fingerprinting requested without a target URL, skipping")

        return self.generate(payloads, attack_type, level, fingerprint=waf, method=method)
