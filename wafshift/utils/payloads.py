"""Payload sources — bundled lists, user files, and attack type detection."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from pathlib import Path

import aiofiles

from wafshift.errors import ConfigurationError
from wafshift.models.types import AttackType

logger = logging.getLogger(__name__)

PAYLOADS_DIR = Path(__file__).parent.parent / "data" / "payloads"

# Attack types whose payloads live in more than one bundled list
_PAYLOAD_SETS: dict[AttackType, tuple[str, ...]] = {
    AttackType.OS_CMDI: ("unixcmdi", "wincmdi"),
}

# Checked in order; the first group with a hit decides
_DETECTION_RULES: tuple[tuple[AttackType, tuple[str, ...]], ...] = (
    (AttackType.XSS, ("<script", "javascript:", "onerror", "onload")),
    (AttackType.SQLI, ("union", "select", "' or ", "1=1")),
    (AttackType.PATH, ("../", "..\\", "/etc/passwd", "c:\\windows")),
    (AttackType.UNIX_CMDI, ("cmd", "bash", "powershell", "wget")),
)


def detect_attack_type(payload: str) -> AttackType:
    """Guess the attack family of a payload from keywords."""
    lowered = payload.lower()
    for attack_type, keywords in _DETECTION_RULES:
        if any(k in lowered for k in keywords):
            return attack_type
    return AttackType.GENERIC


def _clean(lines: Iterable[str]) -> list[str]:
    payloads = []
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            payloads.append(stripped)
    return payloads


def load_payloads_from_file(path: str | Path) -> list[str]:
    """Read one payload per line, skipping blanks and ``#`` comments."""
    with open(path, encoding="utf-8", errors="replace") as f:
        return _clean(f)


async def stream_payloads(path: str | Path) -> AsyncIterator[str]:
    """Async variant of :func:`load_payloads_from_file`, one payload at a time."""
    async with aiofiles.open(path, encoding="utf-8", errors="replace") as f:
        async for line in f:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                yield stripped


def available_payload_sets(payloads_dir: Path | None = None) -> list[str]:
    directory = payloads_dir or PAYLOADS_DIR
    if not directory.exists():
        return []
    return sorted(p.stem for p in directory.glob("*.txt"))


def load_base_payloads(
    attack_type: AttackType | str,
    payloads_dir: Path | None = None,
) -> dict[str, list[str]]:
    """Load the bundled payload list(s) for an attack type.

    ``all`` and ``generic`` load every bundled list. Missing files are
    skipped with a warning; finding nothing at all is a configuration error.
    """
    directory = payloads_dir or PAYLOADS_DIR
    attack_type = AttackType.parse(attack_type)
    if attack_type in (AttackType.ALL, AttackType.GENERIC):
        names = available_payload_sets(directory)
    else:
        names = list(_PAYLOAD_SETS.get(attack_type, (attack_type.value,)))

    payloads: dict[str, list[str]] = {}
    for name in names:
        path = directory / f"{name}.txt"
        try:
            payloads[name] = load_payloads_from_file(path)
        except OSError as exc:
            logger.warning("Could not load payloads for %s: %s", name, exc)

    if not payloads:
        raise ConfigurationError(f"no payloads could be loaded for attack type: {attack_type}")
    return payloads
