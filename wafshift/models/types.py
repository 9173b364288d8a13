"""Core enums — evasion levels, attack types, techniques, WAF products."""

from __future__ import annotations

import logging
from enum import IntEnum, StrEnum

from wafshift.errors import ConfigurationError, UnknownTechniqueError

logger = logging.getLogger(__name__)


# === Levels ===

class EvasionLevel(IntEnum):
    """Escalating evasion tiers. Higher levels include all lower-level variants."""

    BASIC = 1
    MEDIUM = 2
    ADVANCED = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: str | int | EvasionLevel, strict: bool = False) -> EvasionLevel:
        """Parse a level name.

        Unknown names fall back to MEDIUM with a warning, or raise
        ConfigurationError when ``strict`` is set.
        """
        if isinstance(value, EvasionLevel):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                pass
        else:
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
        if strict:
            raise ConfigurationError(f"unknown evasion level: {value!r}")
        logger.warning("Unknown evasion level %r, using 'medium' as default", value)
        return cls.MEDIUM


# === Attack types ===

class AttackType(StrEnum):
    XSS = "xss"
    SQLI = "sqli"
    UNIX_CMDI = "unixcmdi"
    WIN_CMDI = "wincmdi"
    OS_CMDI = "oscmdi"
    PATH = "path"
    FILE_ACCESS = "fileaccess"
    LDAPI = "ldapi"
    SSRF = "ssrf"
    XXE = "xxe"
    GENERIC = "generic"
    ALL = "all"

    @classmethod
    def parse(cls, value: str | AttackType) -> AttackType:
        if isinstance(value, AttackType):
            return value
        key = value.strip().lower()
        aliases = {
            "unix-command-injection": cls.UNIX_CMDI,
            "windows-command-injection": cls.WIN_CMDI,
            "path-traversal": cls.PATH,
            "file-access": cls.FILE_ACCESS,
            "ldap-injection": cls.LDAPI,
        }
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError(f"unknown attack type: {value!r}") from None


# === Techniques ===

class Category(StrEnum):
    ENCODER = "encoder"
    COMMAND = "command"
    PATH = "path"


class TechniqueId(StrEnum):
    BASE64 = "Base64Variants"
    HEX = "HexVariants"
    OCTAL = "OctalVariants"
    HTML = "HTMLVariants"
    UNICODE = "UnicodeVariants"
    URL = "URLVariants"
    DOUBLE_URL = "DoubleURLVariants"
    MIXED_CASE = "MixedCaseVariants"
    UTF8 = "UTF8Variants"
    BEST_FIT = "BestFitVariants"
    UNIX_CMD = "UnixCmdVariants"
    WINDOWS_CMD = "WindowsCmdVariants"
    PATH_TRAVERSAL = "PathTraversalVariants"
    XSS = "XSSVariants"  # reserved, no implementation

    @classmethod
    def parse(cls, value: str | TechniqueId) -> TechniqueId:
        """Accept full ids (``HexVariants``) or short names (``hex``, ``doubleurl``)."""
        if isinstance(value, TechniqueId):
            return value
        key = value.strip().lower().replace("_", "").replace("-", "")
        for member in cls:
            full = member.value.lower()
            if key in (full, full.removesuffix("variants")):
                return member
        raise UnknownTechniqueError(value)


class PayloadMethod(StrEnum):
    """Technique family filter applied on top of the registry list."""

    AUTO = "auto"
    ENCODINGS = "encodings"
    PATHS = "paths"
    COMMANDS = "commands"


# === WAF products ===

class WafType(StrEnum):
    UNKNOWN = "Unknown"
    CLOUDFLARE = "CloudFlare"
    AWS = "AWS WAF"
    MODSECURITY = "ModSecurity"
    IMPERVA = "Imperva"
    F5_BIGIP = "F5 BIG-IP ASM"
    AKAMAI = "Akamai"
    BARRACUDA = "Barracuda"
    SUCURI = "Sucuri"
    AZURE = "Azure WAF"
    FORTINET = "Fortinet FortiWeb"
    CITRIX = "Citrix NetScaler"
    WALLARM = "Wallarm"
    RADWARE = "Radware"
    NGINX = "Nginx WAF"
