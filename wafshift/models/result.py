"""Result models — technique outputs and generation reports."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from wafshift.models.fingerprint import WafFingerprint
from wafshift.models.types import AttackType, EvasionLevel, TechniqueId


class TechniqueResult(BaseModel):
    """Outcome of running one technique against one payload."""

    technique: TechniqueId
    variants: list[str] = Field(default_factory=list)
    failed: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failed

    @classmethod
    def success(cls, technique: TechniqueId, variants: list[str]) -> TechniqueResult:
        return cls(technique=technique, variants=variants)

    @classmethod
    def fail(cls, technique: TechniqueId, error: str) -> TechniqueResult:
        return cls(technique=technique, failed=True, error=error)


class TechniqueFailure(BaseModel):
    payload: str
    technique: TechniqueId
    reason: str


class PayloadResult(BaseModel):
    """Flat record of one (payload, technique) variant set, used for file output."""

    original_payload: str
    attack_type: AttackType
    technique: TechniqueId
    variants: list[str] = Field(default_factory=list)
    level: EvasionLevel


class GenerationReport(BaseModel):
    """Everything produced by a single engine run."""

    attack_type: AttackType | None = None
    level: EvasionLevel = EvasionLevel.MEDIUM
    techniques: list[TechniqueId] = Field(default_factory=list)
    results: dict[str, dict[TechniqueId, list[str]]] = Field(default_factory=dict)
    attack_types: dict[str, AttackType] = Field(default_factory=dict)
    fingerprint: WafFingerprint | None = None
    failures: list[TechniqueFailure] = Field(default_factory=list)

    @property
    def total_variants(self) -> int:
        return sum(
            len(variants)
            for mapping in self.results.values()
            for variants in mapping.values()
        )

    @property
    def payload_results(self) -> list[PayloadResult]:
        """Flatten into one record per (payload, technique)."""
        records: list[PayloadResult] = []
        for payload, mapping in self.results.items():
            attack_type = self.attack_types.get(payload, self.attack_type or AttackType.GENERIC)
            for technique, variants in mapping.items():
                records.append(PayloadResult(
                    original_payload=payload,
                    attack_type=attack_type,
                    technique=technique,
                    variants=variants,
                    level=self.level,
                ))
        return records

    def summary(self) -> dict[str, Any]:
        return {
            "payloads": len(self.results),
            "techniques": [t.value for t in self.techniques],
            "variants": self.total_variants,
            "failures": len(self.failures),
            "waf": self.fingerprint.waf_type.value if self.fingerprint else None,
        }
