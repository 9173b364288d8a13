"""Variant assembly — run techniques against a payload and collect the output.

This is the only place technique faults are caught. A technique that raises
is logged and reported as failed; the remaining techniques still run.
Configuration mistakes (unknown technique names) are not faults and
propagate to the caller.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from wafshift.core.registry import DEFAULT_REGISTRY, TechniqueRegistry
from wafshift.errors import TechniqueExecutionError
from wafshift.evasions import TECHNIQUES, Technique, get_technique
from wafshift.evasions._common import unique
from wafshift.models.result import TechniqueFailure, TechniqueResult
from wafshift.models.types import AttackType, Category, EvasionLevel, PayloadMethod, TechniqueId

logger = logging.getLogger(__name__)

VariantMap = dict[TechniqueId, list[str]]


@dataclass
class AssemblyResult:
    """Per-technique variants for one payload, plus any technique faults."""

    payload: str
    variants: VariantMap = field(default_factory=dict)
    failures: list[TechniqueFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return total_variants(self.variants)


def apply_technique(
    payload: str,
    technique: TechniqueId | str,
    level: EvasionLevel,
    *,
    rng: random.Random | None = None,
    techniques: Mapping[TechniqueId, Technique] = TECHNIQUES,
) -> TechniqueResult:
    """Run a single technique.

    Raises UnknownTechniqueError for names with no implementation. Any other
    exception from the technique is turned into a failed result.
    """
    impl = get_technique(technique, techniques)
    try:
        variants = unique(impl(payload, level, rng))
    except Exception as exc:
        err = TechniqueExecutionError(impl.id.value, exc)
        logger.warning("Technique %s failed on payload %r: %s", impl.id, payload[:60], exc)
        return TechniqueResult.fail(impl.id, str(err))
    return TechniqueResult.success(impl.id, variants)


def _resolve(
    attack_type: AttackType | str,
    technique_filter: Sequence[TechniqueId | str] | None,
    registry: TechniqueRegistry,
) -> list[TechniqueId]:
    if technique_filter is not None:
        return list(dict.fromkeys(TechniqueId.parse(t) for t in technique_filter))
    return list(registry.techniques_or_fallback(attack_type))


def assemble_detailed(
    payload: str,
    attack_type: AttackType | str,
    level: EvasionLevel,
    technique_filter: Sequence[TechniqueId | str] | None = None,
    *,
    registry: TechniqueRegistry = DEFAULT_REGISTRY,
    rng: random.Random | None = None,
    techniques: Mapping[TechniqueId, Technique] = TECHNIQUES,
) -> AssemblyResult:
    result = AssemblyResult(payload=payload)
    if not payload:
        return result
    for tid in _resolve(attack_type, technique_filter, registry):
        outcome = apply_technique(payload, tid, level, rng=rng, techniques=techniques)
        if outcome.failed:
            result.failures.append(TechniqueFailure(
                payload=payload, technique=tid, reason=outcome.error or "",
            ))
        elif outcome.variants:
            result.variants[tid] = outcome.variants
    return result


def assemble(
    payload: str,
    attack_type: AttackType | str,
    level: EvasionLevel,
    technique_filter: Sequence[TechniqueId | str] | None = None,
    *,
    registry: TechniqueRegistry = DEFAULT_REGISTRY,
    rng: random.Random | None = None,
    techniques: Mapping[TechniqueId, Technique] = TECHNIQUES,
) -> VariantMap:
    """Map each technique that produced output to its variants, in run order."""
    return assemble_detailed(
        payload, attack_type, level, technique_filter,
        registry=registry, rng=rng, techniques=techniques,
    ).variants


_METHOD_FILTERS: dict[PayloadMethod, frozenset[TechniqueId]] = {
    PayloadMethod.PATHS: frozenset({TechniqueId.PATH_TRAVERSAL}),
    PayloadMethod.COMMANDS: frozenset({TechniqueId.UNIX_CMD, TechniqueId.WINDOWS_CMD}),
}


def filter_by_method(
    techniques: Iterable[TechniqueId],
    method: PayloadMethod | str,
    registry: TechniqueRegistry = DEFAULT_REGISTRY,
) -> list[TechniqueId]:
    """Restrict a technique list to one family, keeping order."""
    method = PayloadMethod(method)
    techniques = list(techniques)
    if method == PayloadMethod.AUTO:
        return techniques
    if method == PayloadMethod.ENCODINGS:
        return [t for t in techniques if registry.category(t) == Category.ENCODER]
    allowed = _METHOD_FILTERS[method]
    return [t for t in techniques if t in allowed]


def total_variants(mapping: Mapping[TechniqueId, list[str]]) -> int:
    return sum(len(v) for v in mapping.values())
