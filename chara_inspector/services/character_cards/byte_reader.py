"""
Byte Reader
===========

Small helpers for reading PNG chunk fields out of an in-memory buffer.
"""

from typing import Optional, Tuple, Union

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

TEXT_CHUNK_TYPE = b"tEXt"

BytesLike = Union[bytes, bytearray, memoryview]


def as_bytes(data: BytesLike) -> bytes:
    """Return an immutable ``bytes`` view of the input without copying bytes objects."""
    if isinstance(data, bytes):
        return data
    return bytes(data)


def has_png_signature(data: bytes) -> bool:
    """Check whether the buffer starts with the 8-byte PNG signature."""
    return data[:len(PNG_SIGNATURE)] == PNG_SIGNATURE


def read_uint32(data: bytes, offset: int) -> Optional[int]:
    """
    Read a big-endian unsigned 32-bit integer.

    Args:
        data: Buffer to read from
        offset: Position of the first byte

    Returns:
        The integer, or None if fewer than 4 bytes are available at offset
    """
    if offset < 0 or offset + 4 > len(data):
        return None
    return int.from_bytes(data[offset:offset + 4], "big")


def decode_utf8(data: bytes) -> str:
    """Decode UTF-8, replacing invalid sequences instead of raising."""
    return data.decode("utf-8", errors="replace")


def split_keyword(chunk_data: bytes) -> Tuple[bytes, Optional[bytes]]:
    """
    Split tEXt chunk data at its first zero byte.

    Returns:
        (keyword_bytes, text_bytes); text_bytes is None when there is no separator
    """
    null_pos = chunk_data.find(b"\x00")
    if null_pos == -1:
        return chunk_data, None
    return chunk_data[:null_pos], chunk_data[null_pos + 1:]
