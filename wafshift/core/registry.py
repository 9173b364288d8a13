"""Technique registry — attack type to ordered technique lists, plus categories."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from wafshift.errors import ConfigurationError, UnknownTechniqueError
from wafshift.evasions import TECHNIQUES
from wafshift.models.types import AttackType, Category, TechniqueId

T = TechniqueId

FALLBACK_TECHNIQUES: tuple[TechniqueId, ...] = (T.BASE64, T.HEX, T.UNICODE)

_ENCODERS_PATH = (T.UNICODE, T.HEX, T.OCTAL, T.BASE64, T.BEST_FIT, T.PATH_TRAVERSAL, T.URL)
_TRAVERSAL = (
    T.PATH_TRAVERSAL, T.UNICODE, T.HEX, T.OCTAL, T.BASE64, T.BEST_FIT,
    T.URL, T.DOUBLE_URL, T.UTF8,
)


def _dedup(items: Iterable[TechniqueId]) -> tuple[TechniqueId, ...]:
    return tuple(dict.fromkeys(items))


APPLICABILITY: Mapping[AttackType, tuple[TechniqueId, ...]] = MappingProxyType({
    AttackType.XSS: _dedup((
        T.HTML, T.UNICODE, T.HEX, T.OCTAL, T.BASE64, T.BEST_FIT,
        T.URL, T.DOUBLE_URL, T.MIXED_CASE, T.UTF8,
    )),
    AttackType.SQLI: _dedup((
        T.UNICODE, T.HEX, T.OCTAL, T.BASE64, T.BEST_FIT,
        T.URL, T.DOUBLE_URL, T.MIXED_CASE, T.UTF8,
    )),
    AttackType.UNIX_CMDI: _dedup((T.UNIX_CMD, *_ENCODERS_PATH)),
    AttackType.WIN_CMDI: _dedup((T.WINDOWS_CMD, *_ENCODERS_PATH)),
    AttackType.OS_CMDI: _dedup((T.UNIX_CMD, T.WINDOWS_CMD, *_ENCODERS_PATH)),
    AttackType.PATH: _dedup(_TRAVERSAL),
    AttackType.FILE_ACCESS: _dedup(_TRAVERSAL),
    AttackType.LDAPI: _dedup((T.UNICODE, T.HEX, T.OCTAL, T.BASE64, T.BEST_FIT, T.URL)),
    AttackType.SSRF: _dedup((
        T.URL, T.DOUBLE_URL, T.UNICODE, T.HEX, T.OCTAL, T.PATH_TRAVERSAL, T.UTF8,
    )),
    AttackType.XXE: _dedup((T.HTML, T.UNICODE, T.UTF8, T.HEX, T.BASE64, T.URL)),
    AttackType.GENERIC: _dedup((T.BASE64, T.HEX, T.UNICODE, T.URL, T.HTML)),
    AttackType.ALL: _dedup(t for t in TechniqueId if t in TECHNIQUES),
})

CATEGORIES: Mapping[TechniqueId, Category] = MappingProxyType(
    {tid: technique.category for tid, technique in TECHNIQUES.items()}
)


class TechniqueRegistry:
    """Read-only view over the applicability and category tables."""

    def __init__(
        self,
        applicability: Mapping[AttackType, tuple[TechniqueId, ...]] = APPLICABILITY,
        categories: Mapping[TechniqueId, Category] = CATEGORIES,
        fallback: tuple[TechniqueId, ...] = FALLBACK_TECHNIQUES,
    ) -> None:
        self._applicability = applicability
        self._categories = categories
        self._fallback = fallback

    def applicable_techniques(
        self, attack_type: AttackType | str,
    ) -> tuple[tuple[TechniqueId, ...], bool]:
        """Return ``(techniques, exists)``; unknown types give ``((), False)``."""
        key = _coerce(attack_type)
        if key is None or key not in self._applicability:
            return (), False
        return self._applicability[key], True

    def techniques_or_fallback(self, attack_type: AttackType | str) -> tuple[TechniqueId, ...]:
        techniques, exists = self.applicable_techniques(attack_type)
        return techniques if exists else self._fallback

    @property
    def fallback(self) -> tuple[TechniqueId, ...]:
        return self._fallback

    def category(self, technique: TechniqueId | str) -> Category:
        tid = TechniqueId.parse(technique)
        if tid not in self._categories:
            raise UnknownTechniqueError(str(technique))
        return self._categories[tid]

    def is_applicable(self, attack_type: AttackType | str, technique: TechniqueId) -> bool:
        techniques, _ = self.applicable_techniques(attack_type)
        return technique in techniques

    def by_category(self, attack_type: AttackType | str) -> dict[Category, list[TechniqueId]]:
        grouped: dict[Category, list[TechniqueId]] = {}
        for tid in self.techniques_or_fallback(attack_type):
            grouped.setdefault(self.category(tid), []).append(tid)
        return grouped

    @property
    def attack_types(self) -> list[AttackType]:
        return list(self._applicability)

    @property
    def techniques(self) -> list[TechniqueId]:
        return list(self._categories)


def _coerce(attack_type: AttackType | str) -> AttackType | None:
    try:
        return AttackType.parse(attack_type)
    except ConfigurationError:
        return None


DEFAULT_REGISTRY = TechniqueRegistry()
