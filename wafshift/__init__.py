"""wafshift — adaptive WAF evasion payload generator."""

from __future__ import annotations

__version__ = "1.0.0"

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wafshift.config import Settings
    from wafshift.models.result import GenerationReport


class WafShift:
    """Evasion variants in one line.

    Usage::

        report = WafShift("<script>alert(1)</script>").attack("xss").level("basic").generate()
        report = await WafShift("' OR 1=1 --").target("https://example.com").run()
    """

    def __init__(self, *payloads: str, config: Any = None):
        self._payloads = list(payloads)
        self._config = config
        self._attack: str | None = None
        self._level: str | int | None = None
        self._techniques: list[str] = []
        self._method: str | None = None
        self._url: str | None = None
        self._fingerprint = False
        self._rng: Any = None

    def attack(self, attack_type: str) -> WafShift:
        """Fix the attack type instead of detecting it per payload."""
        self._attack = attack_type
        return self

    def level(self, level: str | int) -> WafShift:
        self._level = level
        return self

    def techniques(self, *names: str) -> WafShift:
        """Use exactly these techniques, in this order."""
        self._techniques.extend(names)
        return self

    def method(self, method: str) -> WafShift:
        """Restrict to one technique family: encodings, paths or commands."""
        self._method = method
        return self

    def target(self, url: str, fingerprint: bool = True) -> WafShift:
        """Fingerprint ``url`` and adapt technique order to its WAF."""
        self._url = url
        self._fingerprint = fingerprint
        return self

    def seed(self, rng: Any) -> WafShift:
        """Inject a ``random.Random`` for reproducible output."""
        self._rng = rng
        return self

    def config(self, config: Settings | str | Path) -> WafShift:
        self._config = config
        return self

    async def run(self) -> GenerationReport:
        """Fingerprint the target when one is set, then generate."""
        engine = self._engine()
        if self._techniques:
            waf = await engine.fingerprint(self._url) if self._fingerprint and self._url else None
            payloads = self._payloads or await engine.load_payloads()
            return self._generate(engine, payloads, waf)
        return await engine.run(
            self._payloads or None,
            attack_type=self._attack,
            level=self._level,
            target_url=self._url,
            fingerprint=self._fingerprint,
            method=self._method,
        )

    def generate(self) -> GenerationReport:
        """Offline generation; never touches the network."""
        return self._generate(self._engine(), self._payloads)

    def _generate(self, engine: Any, payloads: list[str], waf: Any = None) -> GenerationReport:
        settings = engine.settings
        return engine.generate(
            payloads,
            self._attack if self._attack is not None else settings.generation.attack_type,
            self._level if self._level is not None else settings.generation.evasion_level,
            self._techniques or None,
            fingerprint=waf,
            method=self._method,
        )

    def _engine(self) -> Any:
        from wafshift.core.engine import EvasionEngine

        return EvasionEngine(self._resolve_config(), rng=self._rng)

    def _resolve_config(self) -> Settings:
        from wafshift.config import Settings

        if isinstance(self._config, Settings):
            return self._config
        if isinstance(self._config, (str, Path)):
            return Settings.load(self._config)
        return Settings.load()


__all__ = ["WafShift", "__version__"]
