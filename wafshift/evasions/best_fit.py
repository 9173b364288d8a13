"""Best-fit and homograph substitution variants.

Windows "best-fit" code page conversion and Unicode normalization both fold
many lookalike characters back to ASCII. A filter that inspects the raw
request misses the keyword while the backend sees it restored.

Every table maps one character to its substitutes. Each (character,
substitute) pair yields one variant with all occurrences replaced, so the
output order follows table order and is deterministic.
"""

from __future__ import annotations

import random
from collections.abc import Mapping

from wafshift.evasions._common import layered
from wafshift.models.types import EvasionLevel

# Accented Latin, then Greek, then Cyrillic for each letter.
BEST_FIT: dict[str, str] = {
    "a": "àáâãäåāăąǎǻάαа",
    "A": "ÀÁÂÃÄÅĀĂĄǍǺΑА",
    "e": "èéêëēĕėęěέεе",
    "E": "ÈÉÊËĒĔĖĘĚΕЕ",
    "i": "ìíîïĩīĭįǐίιі",
    "I": "ÌÍÎÏĨĪĬĮǏΙІ",
    "o": "òóôõöøōŏőǒόοо",
    "O": "ÒÓÔÕÖØŌŎŐǑΟО",
    "u": "ùúûüũūŭůűųǔύυу",
    "U": "ÙÚÛÜŨŪŬŮŰŲǓΥУ",
    "n": "ñńņňŉŋǹήηн",
    "N": "ÑŃŅŇŊǸΗН",
    "c": "çćĉċčςс",
    "C": "ÇĆĈĊČΞС",
    "s": "śŝşšςσс",
    "S": "ŚŜŞŠΣС",
    "z": "źżžζз",
    "Z": "ŹŻŽΖЗ",
    "y": "ýÿŷύυу",
    "Y": "ÝŸŶΥУ",
    "r": "ŕŗřρр",
    "R": "ŔŖŘΡР",
    "l": "ĺļľŀłλл",
    "L": "ĹĻĽĿŁΛЛ",
    "t": "ţťŧτт",
    "T": "ŢŤŦΤТ",
    "d": "ďđδд",
    "D": "ĎĐΔД",
    "g": "ĝğġģγг",
    "G": "ĜĞĠĢΓГ",
    "h": "ĥħηх",
    "H": "ĤĦΗХ",
    "j": "ĵј",
    "J": "ĴЈ",
    "k": "ķĸκк",
    "K": "ĶΚК",
    "p": "πп",
    "P": "ΠП",
    "b": "βб",
    "B": "ΒБ",
    "v": "νв",
    "V": "ΝВ",
    "w": "ŵωв",
    "W": "ŴΩВ",
    "m": "μм",
    "M": "ΜМ",
    "f": "φф",
    "F": "ΦФ",
    "x": "χх",
    "X": "ΧХ",
    "q": "θ",
    "Q": "Θ",
}

HOMOGRAPHS: dict[str, str] = {
    "0": "ОΟ۰०੦૦௦೦൦๐໐၀፰០",
    "1": "lIıɩɪʟᶖᵢᶦᵎᴉľӏɾ",
    "2": "Ƨᒿᒻᒾᒽᒼ",
    "3": "ƷȜƸƐӠᲳ",
    "4": "ᏎᏑᏔᏕ",
    "5": "Ƽ",
    "6": "ϬбϹϺϷ",
    "7": "Ɂ",
    "8": "Ȣ",
    "9": "Ꝯ",
    "a": "ɑαаɐɒ",
    "e": "ɘәɛɜ",
    "o": "οσ",
    "p": "ρр",
    "y": "ɣу",
    "n": "ոռ",
    "h": "հһ",
    "v": "ᴠѵ",
    "w": "ԝω",
    "x": "хχ",
    "c": "ϲс",
    "j": "ϳј",
    "l": "ӏɩ",
    "q": "ԛ",
    "s": "ѕ",
}

# Single-position Latin to Cyrillic swaps.
MIXED_SCRIPT: dict[str, str] = {
    "a": "а", "e": "е", "o": "о", "p": "р", "c": "с", "y": "у", "x": "х",
    "A": "А", "B": "В", "C": "С", "E": "Е", "H": "Н", "K": "К", "M": "М",
    "O": "О", "P": "Р", "T": "Т", "X": "Х", "Y": "У",
}

# Isolated, final, initial and medial presentation forms.
ARABIC_FORMS: dict[str, str] = {
    "ا": "ﺍﺎ",
    "ب": "ﺏﺐﺑﺒ",
    "ت": "ﺕﺖﺗﺘ",
    "ث": "ﺙﺚﺛﺜ",
    "ج": "ﺝﺞﺟﺠ",
    "ح": "ﺡﺢﺣﺤ",
    "خ": "ﺥﺦﺧﺨ",
    "د": "ﺩﺪ",
    "ذ": "ﺫﺬ",
    "ر": "ﺭﺮ",
    "ز": "ﺯﺰ",
    "س": "ﺱﺲﺳﺴ",
    "ش": "ﺵﺶﺷﺸ",
    "ص": "ﺹﺺﺻﺼ",
    "ض": "ﺽﺾﺿﻀ",
    "ط": "ﻁﻂﻃﻄ",
    "ظ": "ﻅﻆﻇﻈ",
    "ع": "ﻉﻊﻋﻌ",
    "غ": "ﻍﻎﻏﻐ",
    "ف": "ﻑﻒﻓﻔ",
    "ق": "ﻕﻖﻗﻘ",
    "ك": "ﻙﻚﻛﻜ",
    "ل": "ﻝﻞﻟﻠ",
    "م": "ﻡﻢﻣﻤ",
    "ن": "ﻥﻦﻧﻨ",
    "ه": "ﻩﻪﻫﻬ",
    "و": "ﻭﻮ",
    "ي": "ﻱﻲﻳﻴ",
}

ZERO_WIDTH = ("\u200b", "\u200c", "\u200d", "\u2060", "\ufeff", "\u034f")

EXOTIC_SPACES = (
    "\u00a0", "\u1680", "\u2000", "\u2001", "\u2002", "\u2003", "\u2004",
    "\u2005", "\u2006", "\u2007", "\u2008", "\u2009", "\u200a", "\u202f",
    "\u205f", "\u3000",
)

# First code point of the capital letters in each mathematical alphabet
# (bold, bold italic, sans-serif, sans-serif bold, monospace). Lowercase
# follows 26 code points later.
_MATH_ALPHA_BASES = (0x1D400, 0x1D468, 0x1D5A0, 0x1D5D4, 0x1D670)
# Bold, double-struck, sans-serif and monospace digit zero.
_MATH_DIGIT_BASES = (0x1D7CE, 0x1D7D8, 0x1D7E2, 0x1D7F6)

MODIFIERS: dict[str, str] = {
    "a": "ᵃ", "b": "ᵇ", "c": "ᶜ", "d": "ᵈ", "e": "ᵉ", "f": "ᶠ", "g": "ᵍ",
    "h": "ʰ", "i": "ⁱ", "j": "ʲ", "k": "ᵏ", "l": "ˡ", "m": "ᵐ", "n": "ⁿ",
    "o": "ᵒ", "p": "ᵖ", "r": "ʳ", "s": "ˢ", "t": "ᵗ", "u": "ᵘ", "v": "ᵛ",
    "w": "ʷ", "x": "ˣ", "y": "ʸ", "z": "ᶻ",
    "0": "⁰₀", "1": "¹₁", "2": "²₂", "3": "³₃", "4": "⁴₄",
    "5": "⁵₅", "6": "⁶₆", "7": "⁷₇", "8": "⁸₈", "9": "⁹₉",
    "+": "⁺₊", "-": "⁻₋", "=": "⁼₌", "(": "⁽₍", ")": "⁾₎",
}


def _math_symbols(ch: str) -> str:
    if "A" <= ch <= "Z":
        return "".join(chr(base + ord(ch) - ord("A")) for base in _MATH_ALPHA_BASES)
    if "a" <= ch <= "z":
        return "".join(chr(base + 26 + ord(ch) - ord("a")) for base in _MATH_ALPHA_BASES)
    if "0" <= ch <= "9":
        return "".join(chr(base + ord(ch) - ord("0")) for base in _MATH_DIGIT_BASES)
    return ""


def substitute_all(payload: str, table: Mapping[str, str]) -> list[str]:
    """One variant per (character, substitute) pair for characters in ``payload``."""
    return [
        payload.replace(ch, sub)
        for ch, subs in table.items()
        if ch in payload
        for sub in subs
    ]


def fullwidth(payload: str) -> str:
    return "".join(
        chr(ord(ch) + 0xFEE0) if "!" <= ch <= "~" else ch for ch in payload
    )


def _basic(payload: str, rng: random.Random) -> list[str]:
    variants = substitute_all(payload, BEST_FIT)
    return variants or [fullwidth(payload)]


def _medium(payload: str, rng: random.Random) -> list[str]:
    return substitute_all(payload, HOMOGRAPHS)


def _mixed_script(payload: str) -> list[str]:
    return [
        payload[:i] + MIXED_SCRIPT[ch] + payload[i + 1:]
        for i, ch in enumerate(payload)
        if ch in MIXED_SCRIPT
    ]


def _invisible(payload: str) -> list[str]:
    variants: list[str] = []
    for zw in ZERO_WIDTH:
        variants.extend((zw + payload, payload + zw, zw.join(payload)))
    if " " in payload:
        variants.extend(payload.replace(" ", space) for space in EXOTIC_SPACES)
    return variants


def _advanced(payload: str, rng: random.Random) -> list[str]:
    math_table = {ch: _math_symbols(ch) for ch in dict.fromkeys(payload)}
    return [
        *_mixed_script(payload),
        *substitute_all(payload, ARABIC_FORMS),
        *_invisible(payload),
        *substitute_all(payload, math_table),
        *substitute_all(payload, MODIFIERS),
    ]


def best_fit_variants(
    payload: str, level: EvasionLevel, rng: random.Random | None = None,
) -> list[str]:
    return layered(payload, level, (_basic, _medium, _advanced), rng)
