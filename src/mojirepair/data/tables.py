"""
Reference character tables: common-use Han, common Japanese Han, rare Han.
Loaded once per process into read-only numpy bitmaps and shared by every engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable

import numpy as np

DATA_DIR = Path(__file__).resolve().parent

COMMON_HAN_FILE = DATA_DIR / "common_han.txt"
JAPANESE_HAN_FILE = DATA_DIR / "japanese_han.txt"
RARE_HAN_FILE = DATA_DIR / "rare_han.txt"

# Insect-radical and metal-radical blocks: almost never seen in real names,
# very often seen in UTF-8 bytes read as GBK.
RARE_HAN_RANGES: tuple[tuple[int, int], ...] = (
    (0x8720, 0x883F),
    (0x9300, 0x9484),
)

BMP_SIZE = 0x10000


def codepoints(text: str) -> np.ndarray:
    """Code points of text as a uint32 array."""
    return np.fromiter(map(ord, text), dtype=np.uint32, count=len(text))


class CodepointTable:
    """
    Immutable code point set.
    BMP members live in a boolean bitmap; supplementary-plane members in a frozenset.
    """

    def __init__(self, chars: Iterable[str] = (), ranges: Iterable[tuple[int, int]] = ()) -> None:
        bits = np.zeros(BMP_SIZE, dtype=bool)
        extra: set[int] = set()
        for lo, hi in ranges:
            if lo < BMP_SIZE:
                bits[lo:min(hi, BMP_SIZE - 1) + 1] = True
            if hi >= BMP_SIZE:
                extra.update(range(max(lo, BMP_SIZE), hi + 1))
        for ch in chars:
            cp = ord(ch)
            if cp < BMP_SIZE:
                bits[cp] = True
            else:
                extra.add(cp)
        bits.setflags(write=False)
        self._bits = bits
        self._extra = frozenset(extra)

    def __contains__(self, ch: object) -> bool:
        if not isinstance(ch, str) or len(ch) != 1:
            return False
        cp = ord(ch)
        if cp < BMP_SIZE:
            return bool(self._bits[cp])
        return cp in self._extra

    def __len__(self) -> int:
        return int(self._bits.sum()) + len(self._extra)

    def __or__(self, other: CodepointTable) -> CodepointTable:
        merged = CodepointTable()
        bits = self._bits | other._bits
        bits.setflags(write=False)
        merged._bits = bits
        merged._extra = self._extra | other._extra
        return merged

    def difference(self, other: CodepointTable) -> CodepointTable:
        result = CodepointTable()
        bits = self._bits & ~other._bits
        bits.setflags(write=False)
        result._bits = bits
        result._extra = self._extra - other._extra
        return result

    def mask(self, text: str) -> np.ndarray:
        """Per-character membership of text as a boolean array."""
        codes = codepoints(text)
        in_bmp = codes < BMP_SIZE
        out = np.zeros(len(codes), dtype=bool)
        out[in_bmp] = self._bits[codes[in_bmp]]
        if self._extra and not in_bmp.all():
            for i in np.flatnonzero(~in_bmp):
                out[i] = int(codes[i]) in self._extra
        return out

    def contains_all(self, text: str) -> bool:
        return bool(text) and bool(self.mask(text).all())

    def contains_any(self, text: str) -> bool:
        return bool(text) and bool(self.mask(text).any())


@dataclass(frozen=True)
class ReferenceTables:
    common_han: CodepointTable
    japanese_han: CodepointTable
    rare_han: CodepointTable

    @classmethod
    def from_chars(
        cls,
        common: Iterable[str] = (),
        japanese: Iterable[str] = (),
        rare: Iterable[str] = (),
        *,
        rare_ranges: Iterable[tuple[int, int]] = (),
    ) -> ReferenceTables:
        """Build tables from character iterables. Rare entries never overlap the common tables."""
        common_t = CodepointTable(common)
        japanese_t = CodepointTable(japanese)
        rare_t = CodepointTable(rare, rare_ranges).difference(common_t | japanese_t)
        return cls(common_han=common_t, japanese_han=japanese_t, rare_han=rare_t)


def read_table_file(path: str | Path) -> str:
    """
    Read a table file: UTF-8 text, lines starting with '#' are comments,
    every other non-whitespace character is a member.
    """
    chars: list[str] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            if line.startswith("#"):
                continue
            chars.extend(ch for ch in line if not ch.isspace())
    return "".join(chars)


def load_reference_tables(
    common_path: str | Path | None = None,
    japanese_path: str | Path | None = None,
    rare_path: str | Path | None = None,
    *,
    rare_ranges: Iterable[tuple[int, int]] = RARE_HAN_RANGES,
) -> ReferenceTables:
    """Load tables from disk; None selects the packaged file."""
    return ReferenceTables.from_chars(
        read_table_file(common_path or COMMON_HAN_FILE),
        read_table_file(japanese_path or JAPANESE_HAN_FILE),
        read_table_file(rare_path or RARE_HAN_FILE),
        rare_ranges=rare_ranges,
    )


@lru_cache(maxsize=1)
def default_tables() -> ReferenceTables:
    """Process-wide packaged tables, loaded on first use."""
    return load_reference_tables()
