"""
listme.sniff
============

Cheap content sniffing used to stop scanning files that are not text.
Mirrors the classic "binary byte + magic number" heuristic: it is a guess,
not a guarantee.
"""
from __future__ import annotations

from typing import Tuple

__all__ = ["is_likely_text", "SNIFF_LEN"]

#: Only the head of the buffer is inspected
SNIFF_LEN: int = 512

# NUL..BS, VT, SO..SUB, FS..US (TAB, LF, FF, CR and ESC are fine)
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

_BINARY_SIGNATURES: Tuple[bytes, ...] = (
    b"%PDF-",
    b"%!PS-Adobe-",
    b"\x89PNG\r\n\x1a\n",
    b"GIF87a",
    b"GIF89a",
    b"\xff\xd8\xff",
    b"PK\x03\x04",
    b"\x1f\x8b\x08",
    b"Rar!\x1a\x07",
    b"7z\xbc\xaf\x27\x1c",
    b"\x7fELF",
    b"\x00asm",
)


def is_likely_text(data: bytes) -> bool:
    """*True* unless *data* looks like part of a binary file."""
    head = data[:SNIFF_LEN]
    if head.lstrip(b"\t\n\x0c\r ").startswith(_BINARY_SIGNATURES):
        return False
    return not any(byte in _BINARY_BYTES for byte in head)
