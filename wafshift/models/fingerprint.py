"""WAF fingerprint models — immutable once a run completes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from wafshift.models.types import WafType


class WafBehavior(BaseModel):
    """Behavioral flags derived from probe responses."""

    model_config = ConfigDict(frozen=True)

    blocks_basic_xss: bool = False
    blocks_basic_sqli: bool = False
    blocks_command_injection: bool = False
    has_rate_limiting: bool = False
    javascript_challenge: bool = False
    custom_error_pages: bool = False
    response_codes: list[int] = Field(default_factory=list)

    @property
    def flags(self) -> dict[str, bool]:
        return {
            "blocks_basic_xss": self.blocks_basic_xss,
            "blocks_basic_sqli": self.blocks_basic_sqli,
            "blocks_command_injection": self.blocks_command_injection,
            "has_rate_limiting": self.has_rate_limiting,
            "javascript_challenge": self.javascript_challenge,
            "custom_error_pages": self.custom_error_pages,
        }


class WafFingerprint(BaseModel):
    """Classification of the WAF in front of a target."""

    model_config = ConfigDict(frozen=True)

    waf_type: WafType = WafType.UNKNOWN
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    evidence: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    response_codes: list[int] = Field(default_factory=list)
    behavior: WafBehavior = Field(default_factory=WafBehavior)
    target_url: str = ""

    @property
    def detected(self) -> bool:
        return self.waf_type != WafType.UNKNOWN

    @classmethod
    def unknown(cls, target_url: str = "", **kwargs) -> WafFingerprint:
        return cls(waf_type=WafType.UNKNOWN, target_url=target_url, **kwargs)
