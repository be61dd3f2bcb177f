"""
Encoding registry and the encode-under-A / decode-under-B primitive.
Names are case-insensitive and treat '_' and '-' alike (SHIFT_JIS == shift-jis).
"""
from __future__ import annotations

import chardet

from mojirepair.errors import CodecFailure, UnsupportedEncoding

# Display name -> Python codec
PYTHON_CODECS: dict[str, str] = {
    "UTF8": "utf-8",
    "UTF-8": "utf-8",
    "UTF-16": "utf-16",
    "ISO-8859-1": "latin-1",
    "LATIN1": "latin-1",
    "LATIN-1": "latin-1",
    "CP1252": "cp1252",
    "GBK": "gbk",
    "GB2312": "gb2312",
    "GB18030": "gb18030",
    "BIG5": "big5",
    "SHIFT-JIS": "shift_jis",
    "SJIS": "shift_jis",
    "CP932": "cp932",
    "EUC-JP": "euc_jp",
    "EUC-KR": "euc_kr",
    "CP949": "cp949",
}

SUPPORTED_ENCODINGS = ["UTF8", "UTF-16", "ISO-8859-1", "CP1252", "GBK", "GB2312", "GB18030",
                       "BIG5", "SHIFT_JIS", "CP932", "EUC-JP", "EUC-KR", "CP949"]

DEFAULT_SOURCE_ENCODINGS = ["SHIFT_JIS", "GBK", "UTF8", "UTF-16", "ISO-8859-1"]
DEFAULT_TARGET_ENCODINGS = ["SHIFT_JIS", "GBK", "UTF8"]
DECODE_ENCODINGS = ["ISO-8859-1", "UTF8", "UTF-16", "GBK", "BIG5", "SHIFT_JIS", "EUC-JP", "EUC-KR"]


def python_codec(name: str) -> str:
    """Python codec for an encoding name. Raises UnsupportedEncoding."""
    key = str(name).strip().upper().replace("_", "-")
    try:
        return PYTHON_CODECS[key]
    except KeyError:
        raise UnsupportedEncoding(name) from None


def same_codec(a: str, b: str) -> bool:
    """True when both names resolve to the same codec (UTF8 vs UTF-8)."""
    return python_codec(a) == python_codec(b)


def encode_as(text: str, encoding: str) -> bytes:
    codec = python_codec(encoding)
    try:
        return text.encode(codec)
    except UnicodeError as e:
        raise CodecFailure(encoding, "encode", e) from e


def decode_as(data: bytes, encoding: str) -> str:
    codec = python_codec(encoding)
    try:
        return data.decode(codec)
    except UnicodeError as e:
        raise CodecFailure(encoding, "decode", e) from e


def round_trip(text: str, source: str, target: str) -> str:
    """Re-encode text as if it were valid under source, then decode those bytes as target."""
    return decode_as(encode_as(text, source), target)


def is_self_consistent(text: str, encoding: str) -> bool:
    """decode(encode(text, E), E) == text."""
    try:
        return round_trip(text, encoding, encoding) == text
    except CodecFailure:
        return False


def guess_encodings(data: bytes, min_confidence: float = 0.7) -> list[tuple[str, float]]:
    """chardet's guesses for raw bytes, most confident first."""
    if not data:
        return []
    guesses = []
    for r in chardet.detect_all(data):
        enc = r.get("encoding")
        conf = float(r.get("confidence") or 0.0)
        if enc and conf >= min_confidence:
            guesses.append((enc, round(conf, 2)))
    return guesses
