"""Shared helpers for reading filing bytes."""
from __future__ import annotations

import hashlib
from io import BytesIO
from pathlib import Path

CONTROL_CHARACTERS = frozenset(chr(code) for code in range(32)) - {"\t"}


def ensure_bytes(source: BytesIO | Path | bytes | str) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, (Path, str)):
        return Path(source).read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def compute_file_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def to_text(raw: str | bytes, encoding: str = "utf-8") -> str:
    """Decode one raw line and drop its line terminator.

    Raises ``UnicodeDecodeError`` for bytes that are not text in ``encoding``.
    """
    text = raw.decode(encoding) if isinstance(raw, bytes) else raw
    return text.rstrip("\r\n")


def has_control_characters(text: str) -> bool:
    return any(char in CONTROL_CHARACTERS for char in text)
