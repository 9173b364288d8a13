"""Adaptive technique selection — reorder techniques for a detected WAF.

Each WAF product has a short list of techniques that tend to get past its
rule set. The list is intersected with what is applicable to the attack
type, keeping the WAF-specific order.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from wafshift.core.registry import DEFAULT_REGISTRY, TechniqueRegistry
from wafshift.models.fingerprint import WafFingerprint
from wafshift.models.types import AttackType, TechniqueId, WafType

T = TechniqueId

GENERIC_TECHNIQUES: tuple[TechniqueId, ...] = (T.UNICODE, T.URL, T.HTML, T.HEX, T.BASE64)

OPTIMAL_TECHNIQUES: Mapping[WafType, tuple[TechniqueId, ...]] = MappingProxyType({
    # Unicode normalization and case folding slip past its managed rules
    WafType.CLOUDFLARE: (T.UNICODE, T.MIXED_CASE, T.BEST_FIT, T.DOUBLE_URL),
    # CRS decodes one layer; escapes need to survive transformation chains
    WafType.MODSECURITY: (T.UNICODE, T.HEX, T.OCTAL, T.HTML),
    WafType.AWS: (T.URL, T.UNICODE, T.UTF8, T.BEST_FIT),
    WafType.F5_BIGIP: (T.UNICODE, T.HEX, T.DOUBLE_URL, T.MIXED_CASE),
    WafType.IMPERVA: (T.BEST_FIT, T.UNICODE, T.MIXED_CASE, T.UTF8),
    WafType.AKAMAI: (T.UNICODE, T.DOUBLE_URL, T.BEST_FIT, T.HTML),
})


def optimal_techniques(
    waf_type: WafType,
    table: Mapping[WafType, tuple[TechniqueId, ...]] = OPTIMAL_TECHNIQUES,
) -> tuple[TechniqueId, ...]:
    return table.get(waf_type, GENERIC_TECHNIQUES)


def prioritize(
    waf_type: WafType,
    attack_type: AttackType | str,
    registry: TechniqueRegistry = DEFAULT_REGISTRY,
    table: Mapping[WafType, tuple[TechniqueId, ...]] = OPTIMAL_TECHNIQUES,
) -> list[TechniqueId]:
    """WAF-preferred techniques that apply to ``attack_type``, in WAF order.

    Falls back to the plain applicability list when the two do not overlap,
    so a run never ends up with nothing to generate.
    """
    applicable = registry.techniques_or_fallback(attack_type)
    preferred = [t for t in optimal_techniques(waf_type, table) if t in applicable]
    return preferred or list(applicable)


def recommend(fingerprint: WafFingerprint) -> tuple[TechniqueId, ...]:
    return optimal_techniques(fingerprint.waf_type)
