"""
Script classification: which writing systems a string is made of.
Range predicates are compiled regexes; table predicates use the reference bitmaps.
All predicates return False for the empty string.
"""
from __future__ import annotations

import re
from enum import Enum

from mojirepair.data.tables import CodepointTable, ReferenceTables

# ASCII, CJK symbols and punctuation, fullwidth ASCII variants, middle dot,
# general punctuation dashes and quotes.
NEUTRAL_RANGES: tuple[tuple[int, int], ...] = (
    (0x0000, 0x007F),
    (0x00B7, 0x00B7),
    (0x2010, 0x2027),
    (0x3000, 0x303F),
    (0xFF01, 0xFF5E),
)
# Neutral set minus ASCII letters: a lone Latin letter next to Han is a decode artefact.
HAN_NEUTRAL_RANGES: tuple[tuple[int, int], ...] = (
    (0x0000, 0x0040),
    (0x005B, 0x0060),
    (0x007B, 0x007F),
) + NEUTRAL_RANGES[1:]
HAN_RANGES: tuple[tuple[int, int], ...] = (
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xF900, 0xFAFF),
    (0x20000, 0x3134F),
)
# Hiragana, katakana, katakana phonetic extensions. Halfwidth forms are tracked apart.
KANA_RANGES: tuple[tuple[int, int], ...] = (
    (0x3040, 0x309F),
    (0x30A0, 0x30FF),
    (0x31F0, 0x31FF),
)
HALFWIDTH_KANA_RANGES: tuple[tuple[int, int], ...] = ((0xFF61, 0xFF9F),)
HANGUL_RANGES: tuple[tuple[int, int], ...] = (
    (0x1100, 0x11FF),
    (0x3130, 0x318F),
    (0xAC00, 0xD7A3),
)


def char_class(ranges: tuple[tuple[int, int], ...]) -> str:
    """Regex character-class body for a list of inclusive code point ranges."""
    return "".join(
        re.escape(chr(lo)) if lo == hi else f"{re.escape(chr(lo))}-{re.escape(chr(hi))}"
        for lo, hi in ranges
    )


_NEUTRAL = char_class(NEUTRAL_RANGES)
_HAN = char_class(HAN_RANGES)
_KANA = char_class(KANA_RANGES)
_HANGUL = char_class(HANGUL_RANGES)

RE_ASCII_ONLY = re.compile(r"[\x00-\x7f]+")
RE_ASCII_ANY = re.compile(r"[\x00-\x7f]")
RE_HAN_ANY = re.compile(f"[{_HAN}]")
RE_HAN_ONLY = re.compile(f"[{char_class(HAN_NEUTRAL_RANGES)}{_HAN}]+")
RE_KANA_ANY = re.compile(f"[{_KANA}]")
RE_HALFWIDTH_KANA_ANY = re.compile(f"[{char_class(HALFWIDTH_KANA_RANGES)}]")
RE_HANGUL_ANY = re.compile(f"[{_HANGUL}]")
RE_HANGUL_ONLY = re.compile(f"[{_NEUTRAL}{_HANGUL}]+")


def is_ascii_only(text: str) -> bool:
    return bool(text) and RE_ASCII_ONLY.fullmatch(text) is not None


def has_ascii(text: str) -> bool:
    return bool(text) and RE_ASCII_ANY.search(text) is not None


def has_han(text: str) -> bool:
    """Any CJK ideograph, common or not."""
    return bool(text) and RE_HAN_ANY.search(text) is not None


def is_han_only(text: str) -> bool:
    """Han ideographs plus digits and neutral punctuation, at least one ideograph."""
    return bool(text) and RE_HAN_ONLY.fullmatch(text) is not None and has_han(text)


def has_kana(text: str) -> bool:
    return bool(text) and RE_KANA_ANY.search(text) is not None


def has_halfwidth_kana(text: str) -> bool:
    return bool(text) and RE_HALFWIDTH_KANA_ANY.search(text) is not None


def has_hangul(text: str) -> bool:
    return bool(text) and RE_HANGUL_ANY.search(text) is not None


def is_hangul_only(text: str) -> bool:
    return bool(text) and RE_HANGUL_ONLY.fullmatch(text) is not None and has_hangul(text)


class ScriptTag(str, Enum):
    ASCII_ONLY = "AsciiOnly"
    HAS_ASCII = "HasAscii"
    HAN_ANY = "HanAny"
    HAN_COMMON_ONLY = "HanCommonOnly"
    HAN_RARE_ANY = "HanRareAny"
    JAPANESE_LIKELY = "JapaneseLikely"
    HANGUL_ONLY = "HangulOnly"
    HALFWIDTH_KANA = "HalfwidthKana"
    PRIVATE_USE = "PrivateUse"
    SURROGATE = "Surrogate"
    LATIN_EXTENDED = "LatinExtended"
    MINOR_SCRIPT = "MinorScript"


class ScriptClassifier:
    """
    Table-backed predicates. The allow-sets are combined once per classifier,
    so each call is a single bitmap lookup over the string.
    """

    def __init__(self, tables: ReferenceTables) -> None:
        self.tables = tables
        neutral = CodepointTable(ranges=NEUTRAL_RANGES)
        self._common_allowed = neutral | tables.common_han
        self._japanese_allowed = neutral | CodepointTable(ranges=KANA_RANGES) | tables.japanese_han
        self._japanese_script = CodepointTable(ranges=KANA_RANGES) | tables.japanese_han

    def is_common_use_only(self, text: str) -> bool:
        """Every code point is neutral punctuation/ASCII or a common-use Han."""
        return self._common_allowed.contains_all(text)

    def is_japanese_likely(self, text: str) -> bool:
        """ASCII, CJK punctuation, kana and common Japanese Han only; no rare Han."""
        if not self._japanese_allowed.contains_all(text):
            return False
        return self._japanese_script.contains_any(text) and not self.has_rare_han(text)

    def has_rare_han(self, text: str) -> bool:
        return self.tables.rare_han.contains_any(text)

    def classify(self, text: str) -> frozenset[ScriptTag]:
        """All tags that apply to text."""
        from mojirepair.script.markers import (
            has_latin_extended,
            has_minor_script,
            has_private_use,
            has_surrogate,
        )
        if not text:
            return frozenset()
        checks = [
            (ScriptTag.ASCII_ONLY, is_ascii_only),
            (ScriptTag.HAS_ASCII, has_ascii),
            (ScriptTag.HAN_ANY, has_han),
            (ScriptTag.HAN_COMMON_ONLY, lambda s: has_han(s) and self.is_common_use_only(s)),
            (ScriptTag.HAN_RARE_ANY, self.has_rare_han),
            (ScriptTag.JAPANESE_LIKELY, self.is_japanese_likely),
            (ScriptTag.HANGUL_ONLY, is_hangul_only),
            (ScriptTag.HALFWIDTH_KANA, has_halfwidth_kana),
            (ScriptTag.PRIVATE_USE, has_private_use),
            (ScriptTag.SURROGATE, has_surrogate),
            (ScriptTag.LATIN_EXTENDED, has_latin_extended),
            (ScriptTag.MINOR_SCRIPT, has_minor_script),
        ]
        return frozenset(tag for tag, check in checks if check(text))
