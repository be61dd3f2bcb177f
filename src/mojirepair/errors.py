"""
Exception types. Codec errors are per-pair and never escape the engine.
"""
from __future__ import annotations


class MojirepairError(Exception):
    pass


class UnsupportedEncoding(MojirepairError, LookupError):
    """Encoding name is not in the supported set."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unsupported encoding: {name!r}")
        self.name = name


class CodecFailure(MojirepairError, ValueError):
    """Text cannot be encoded, or bytes cannot be decoded, under a given encoding."""

    def __init__(self, encoding: str, operation: str, cause: Exception | None = None) -> None:
        msg = f"{operation} failed under {encoding}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
        self.encoding = encoding
        self.operation = operation


class ConfigError(MojirepairError, ValueError):
    pass
