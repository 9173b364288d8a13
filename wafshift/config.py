"""Configuration — Pydantic Settings + YAML loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wafshift.models.types import AttackType, EvasionLevel, PayloadMethod

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "default.yaml"
OUTPUT_DIR = Path("output")


class HttpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WAFSHIFT_HTTP_")

    timeout: float = 10.0
    probe_timeout: float = 5.0
    user_agent: str = "wafshift/1.0"
    verify_ssl: bool = False
    follow_redirects: bool = True
    max_redirects: int = 5


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WAFSHIFT_GENERATION_")

    attack_type: AttackType | None = None  # None: detect per payload
    evasion_level: EvasionLevel = EvasionLevel.MEDIUM
    payload_method: PayloadMethod = PayloadMethod.AUTO
    payload_file: Path | None = None
    payloads: list[str] = Field(default_factory=list)
    max_variants: int = Field(default=0, ge=0)  # per payload, 0 = unlimited

    @field_validator("attack_type", mode="before")
    @classmethod
    def _parse_attack_type(cls, value: Any) -> AttackType | None:
        if value is None or value == "":
            return None
        return AttackType.parse(value)

    @field_validator("evasion_level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> EvasionLevel:
        return EvasionLevel.parse(value, strict=True)


class TargetSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WAFSHIFT_TARGET_")

    url: str = ""
    fingerprint: bool = False


class OutputSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WAFSHIFT_OUTPUT_")

    directory: Path = OUTPUT_DIR
    write_simple: bool = True
    write_jsonl: bool = True


class Settings(BaseSettings):
    """Root settings — merges defaults, YAML config, and env vars."""

    model_config = SettingsConfigDict(env_prefix="WAFSHIFT_")

    http: HttpSettings = Field(default_factory=HttpSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    target: TargetSettings = Field(default_factory=TargetSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    log_level: str = "INFO"

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> Settings:
        """Load settings from YAML file, falling back to defaults."""
        data: dict[str, Any] = {}

        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
                if isinstance(raw, dict):
                    data = raw

        return cls(**data)
