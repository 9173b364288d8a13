"""Exception hierarchy for the evasion engine."""

from __future__ import annotations


class WafShiftError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(WafShiftError):
    """Unknown attack type, evasion level or technique name.

    Raised immediately and never retried.
    """


class UnknownTechniqueError(ConfigurationError):
    def __init__(self, technique: str) -> None:
        super().__init__(f"evasion technique {technique!r} not found")
        self.technique = technique


class TechniqueExecutionError(WafShiftError):
    """Internal fault inside a single transform."""

    def __init__(self, technique: str, cause: BaseException) -> None:
        super().__init__(f"{technique} failed: {type(cause).__name__}: {cause}")
        self.technique = technique
        self.cause = cause


class NetworkError(WafShiftError):
    """Request to a target failed or timed out."""


class BaselineRequestError(NetworkError):
    """The baseline request of a fingerprint run failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to get baseline response from {url}: {reason}")
        self.url = url
        self.reason = reason
