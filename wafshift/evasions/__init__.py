"""Encoding transform library.

Every technique is a pure function ``(payload, level, rng) -> list[str]``
returning unique variants in generation order. ``TECHNIQUES`` is the
dispatch table used by assembly; it only lists implemented techniques.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from wafshift.errors import UnknownTechniqueError
from wafshift.evasions.b64 import base64_variants
from wafshift.evasions.best_fit import best_fit_variants
from wafshift.evasions.double_url import double_url_variants
from wafshift.evasions.hexadecimal import hex_variants
from wafshift.evasions.html import html_variants
from wafshift.evasions.mixed_case import mixed_case_variants
from wafshift.evasions.octal import octal_variants
from wafshift.evasions.path_traversal import path_traversal_variants
from wafshift.evasions.unicode import unicode_variants
from wafshift.evasions.unix_cmd import unix_cmd_variants
from wafshift.evasions.url import url_variants
from wafshift.evasions.utf8 import utf8_variants
from wafshift.evasions.windows_cmd import windows_cmd_variants
from wafshift.models.types import Category, EvasionLevel, TechniqueId

TechniqueFunc = Callable[..., list[str]]


@dataclass(frozen=True, slots=True)
class Technique:
    id: TechniqueId
    category: Category
    func: TechniqueFunc
    deterministic: bool
    description: str = ""

    def __call__(
        self, payload: str, level: EvasionLevel, rng: random.Random | None = None,
    ) -> list[str]:
        return self.func(payload, level, rng)


_ALL: tuple[Technique, ...] = (
    Technique(TechniqueId.BASE64, Category.ENCODER, base64_variants, True,
              "Standard, URL-safe and mis-padded base64"),
    Technique(TechniqueId.HEX, Category.ENCODER, hex_variants, False,
              "Hex escapes in brace, backslash, percent and concat forms"),
    Technique(TechniqueId.OCTAL, Category.ENCODER, octal_variants, False,
              "Octal escapes, mixed radix and shell/JS embeddings"),
    Technique(TechniqueId.HTML, Category.ENCODER, html_variants, False,
              "HTML numeric and named entities"),
    Technique(TechniqueId.UNICODE, Category.ENCODER, unicode_variants, False,
              "Unicode escapes, homoglyphs and bidi tricks"),
    Technique(TechniqueId.URL, Category.ENCODER, url_variants, True,
              "Percent encoding, partial and malformed"),
    Technique(TechniqueId.DOUBLE_URL, Category.ENCODER, double_url_variants, True,
              "Double and triple percent encoding"),
    Technique(TechniqueId.MIXED_CASE, Category.ENCODER, mixed_case_variants, True,
              "Letter case manipulation"),
    Technique(TechniqueId.UTF8, Category.ENCODER, utf8_variants, True,
              "UTF-8 byte forms, overlong and normalization tricks"),
    Technique(TechniqueId.BEST_FIT, Category.ENCODER, best_fit_variants, True,
              "Best-fit and homograph substitution"),
    Technique(TechniqueId.UNIX_CMD, Category.COMMAND, unix_cmd_variants, False,
              "Bash command obfuscation"),
    Technique(TechniqueId.WINDOWS_CMD, Category.COMMAND, windows_cmd_variants, False,
              "cmd.exe and PowerShell obfuscation"),
    Technique(TechniqueId.PATH_TRAVERSAL, Category.PATH, path_traversal_variants, False,
              "Traversal sequence rewriting and server parser quirks"),
)

TECHNIQUES: Mapping[TechniqueId, Technique] = MappingProxyType({t.id: t for t in _ALL})


def get_technique(
    technique: TechniqueId | str,
    techniques: Mapping[TechniqueId, Technique] = TECHNIQUES,
) -> Technique:
    """Look up an implemented technique by id or name."""
    tid = TechniqueId.parse(technique)
    if tid not in techniques:
        raise UnknownTechniqueError(str(technique))
    return techniques[tid]


def apply(
    technique: TechniqueId | str,
    payload: str,
    level: EvasionLevel,
    rng: random.Random | None = None,
) -> list[str]:
    return get_technique(technique)(payload, level, rng)


__all__ = ["TECHNIQUES", "Technique", "apply", "get_technique"]
