"""
Corruption markers: code point signatures left behind by mis-decoding.
One independent rule per marker; the ranges below are tuned against real
filename corpora and can be recalibrated without touching the rule structure.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum

from mojirepair.data.tables import ReferenceTables
from mojirepair.script.classify import HALFWIDTH_KANA_RANGES, char_class


class Severity(IntEnum):
    SOFT = 0
    MEDIUM = 1
    HIGH = 2
    FATAL = 3


class MarkerCode(str, Enum):
    REPLACEMENT = "REPLACEMENT"
    LATIN_EXT = "LATIN_EXT"
    MINOR_SCRIPT = "MINOR_SCRIPT"
    CJK_SPECIAL = "CJK_SPECIAL"
    SURROGATE = "SURROGATE"
    PRIVATE_USE = "PRIVATE_USE"
    RARE_HAN = "RARE_HAN"
    HALFWIDTH_KANA = "HALFWIDTH_KANA"


@dataclass(frozen=True)
class Marker:
    code: MarkerCode
    severity: Severity
    description: str


# C1 controls, Latin-1 letters, Latin Extended-A/B, bopomofo.
LATIN_EXT_RANGES = ((0x0080, 0x009F), (0x00C0, 0x00D6), (0x00D8, 0x024F), (0x3100, 0x312F))
# Greek through Ethiopic and beyond (Hangul Jamo carved out), Yi, Vai,
# Cherokee supplement, Hangul Jamo Extended-B.
MINOR_SCRIPT_RANGES = (
    (0x0370, 0x10FF),
    (0x1200, 0x1CFF),
    (0xA000, 0xA7FF),
    (0xAB30, 0xABFF),
    (0xD7B0, 0xD7FF),
)
CJK_SPECIAL_RANGES = ((0x3300, 0x33FF), (0xFE30, 0xFE4F))
SURROGATE_RANGES = ((0xD800, 0xDFFF),)
PRIVATE_USE_RANGES = ((0xE000, 0xF8FF), (0xF0000, 0x10FFFF))

RE_REPLACEMENT = re.compile("[?\ufffd]")
RE_LATIN_EXT = re.compile(f"[{char_class(LATIN_EXT_RANGES)}]")
RE_MINOR_SCRIPT = re.compile(f"[{char_class(MINOR_SCRIPT_RANGES)}]")
RE_CJK_SPECIAL = re.compile(f"[{char_class(CJK_SPECIAL_RANGES)}]")
RE_SURROGATE = re.compile(f"[{char_class(SURROGATE_RANGES)}]")
RE_PRIVATE_USE = re.compile(f"[{char_class(PRIVATE_USE_RANGES)}]")
RE_HALFWIDTH_KANA = re.compile(f"[{char_class(HALFWIDTH_KANA_RANGES)}]")


def has_replacement(text: str) -> bool:
    return RE_REPLACEMENT.search(text) is not None


def has_latin_extended(text: str) -> bool:
    return RE_LATIN_EXT.search(text) is not None


def has_minor_script(text: str) -> bool:
    return RE_MINOR_SCRIPT.search(text) is not None


def has_surrogate(text: str) -> bool:
    return RE_SURROGATE.search(text) is not None


def has_private_use(text: str) -> bool:
    return RE_PRIVATE_USE.search(text) is not None


# (code, severity, description, pattern); RARE_HAN is table-driven and handled apart.
MARKER_RULES: list[tuple[MarkerCode, Severity, str, re.Pattern[str]]] = [
    (MarkerCode.REPLACEMENT, Severity.FATAL, "replacement character or '?'", RE_REPLACEMENT),
    (MarkerCode.LATIN_EXT, Severity.HIGH, "extended Latin letters", RE_LATIN_EXT),
    (MarkerCode.CJK_SPECIAL, Severity.MEDIUM, "CJK compatibility characters", RE_CJK_SPECIAL),
    (MarkerCode.MINOR_SCRIPT, Severity.HIGH, "minor script characters", RE_MINOR_SCRIPT),
    (MarkerCode.SURROGATE, Severity.HIGH, "unpaired surrogate", RE_SURROGATE),
    (MarkerCode.PRIVATE_USE, Severity.HIGH, "private use area", RE_PRIVATE_USE),
    (MarkerCode.HALFWIDTH_KANA, Severity.SOFT, "halfwidth kana", RE_HALFWIDTH_KANA),
]


class CorruptionDetector:
    def __init__(self, tables: ReferenceTables) -> None:
        self.tables = tables

    def detect_markers(self, text: str) -> list[Marker]:
        """Every marker whose rule fires on text, in rule order."""
        if not text:
            return []
        markers = [
            Marker(code, severity, desc)
            for code, severity, desc, pattern in MARKER_RULES
            if pattern.search(text)
        ]
        if self.tables.rare_han.contains_any(text):
            markers.append(Marker(MarkerCode.RARE_HAN, Severity.MEDIUM, "rare Han character"))
        return markers

    def has_corruption(self, text: str) -> bool:
        """Any marker of medium severity or above. Halfwidth kana never counts."""
        return any(m.severity >= Severity.MEDIUM for m in self.detect_markers(text))

    def has_hard_corruption(self, text: str) -> bool:
        """Like has_corruption, but rare Han alone does not count."""
        return any(
            m.severity >= Severity.MEDIUM and m.code is not MarkerCode.RARE_HAN
            for m in self.detect_markers(text)
        )

    def is_unrecoverable(self, text: str) -> bool:
        return any(m.severity is Severity.FATAL for m in self.detect_markers(text))
