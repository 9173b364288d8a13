"""Data models — contracts shared by the engine, fingerprinter and CLI."""

from wafshift.models.fingerprint import WafBehavior, WafFingerprint
from wafshift.models.harness import (
    BodyInjection,
    HeaderInjection,
    InjectionPoint,
    ProtocolInjection,
    QueryInjection,
    RequestOutcome,
)
from wafshift.models.result import (
    GenerationReport,
    PayloadResult,
    TechniqueFailure,
    TechniqueResult,
)
from wafshift.models.types import (
    AttackType,
    Category,
    EvasionLevel,
    PayloadMethod,
    TechniqueId,
    WafType,
)

__all__ = [
    "AttackType",
    "BodyInjection",
    "Category",
    "EvasionLevel",
    "GenerationReport",
    "HeaderInjection",
    "InjectionPoint",
    "PayloadMethod",
    "PayloadResult",
    "ProtocolInjection",
    "QueryInjection",
    "RequestOutcome",
    "TechniqueFailure",
    "TechniqueId",
    "TechniqueResult",
    "WafBehavior",
    "WafFingerprint",
    "WafType",
]
