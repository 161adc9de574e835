"""
PNG Text Chunk Scanner
======================

Locates tEXt chunks in raw PNG bytes.

Two scans are provided:

- ``scan_text_chunks_strict`` walks the chunk stream from the signature onward,
  honouring each chunk's length and CRC fields.
- ``scan_text_chunks_lenient`` searches for the ``tEXt`` marker anywhere in the
  buffer and rebuilds the chunk from the length stored just before it. It copes
  with truncated or partially corrupted files where a strict walk loses sync.

Neither scan raises; malformed regions are skipped and the result may be empty.
"""

import logging
from dataclasses import dataclass
from typing import List

from .byte_reader import (
    BytesLike,
    TEXT_CHUNK_TYPE,
    PNG_SIGNATURE,
    as_bytes,
    decode_utf8,
    read_uint32,
    split_keyword,
)

logger = logging.getLogger(__name__)

# length(4) + type(4) + crc(4)
CHUNK_HEADER_AND_CRC = 12

# Lenient lengths must fall strictly inside (0, MAX_LENIENT_CHUNK_LENGTH)
MAX_LENIENT_CHUNK_LENGTH = 1_000_000


@dataclass(frozen=True)
class TextChunk:
    """A keyword/text pair read from a PNG tEXt chunk."""
    keyword: str
    text: str


def scan_text_chunks_strict(png_data: BytesLike) -> List[TextChunk]:
    """
    Walk the PNG chunk stream and collect every tEXt chunk.

    The first 8 bytes are assumed to be the PNG signature and are skipped
    without checking. The walk stops when fewer than 12 bytes remain or when a
    chunk claims more data than the buffer holds.

    Args:
        png_data: Raw PNG bytes

    Returns:
        tEXt chunks in stream order
    """
    data = as_bytes(png_data)
    chunks: List[TextChunk] = []
    offset = len(PNG_SIGNATURE)

    while len(data) - offset >= CHUNK_HEADER_AND_CRC:
        length = read_uint32(data, offset)
        chunk_type = data[offset + 4:offset + 8]
        data_start = offset + 8
        data_end = data_start + length

        if data_end > len(data):
            logger.debug(
                f"Strict scan: chunk {chunk_type!r} at offset {offset} claims {length} bytes, "
                f"only {len(data) - data_start} available; stopping"
            )
            break

        if chunk_type == TEXT_CHUNK_TYPE:
            keyword_bytes, text_bytes = split_keyword(data[data_start:data_end])
            chunks.append(TextChunk(
                keyword=decode_utf8(keyword_bytes),
                text=decode_utf8(text_bytes) if text_bytes is not None else "",
            ))

        # CRC is skipped regardless of type
        offset = data_end + 4

    logger.debug(f"Strict scan found {len(chunks)} tEXt chunk(s) in {len(data)} bytes")
    return chunks


def scan_text_chunks_lenient(png_data: BytesLike) -> List[TextChunk]:
    """
    Find tEXt chunks by searching for the marker instead of walking the stream.

    Each occurrence of ``tEXt`` is treated as a chunk type field: the 4 bytes
    before it are read as the big-endian length, and the chunk is kept only if
    that length is in range, the data fits in the buffer, and the data contains
    a zero byte separating keyword from text. The search resumes 4 bytes after
    every marker, so markers inside another chunk's data are still examined.

    Args:
        png_data: Any byte buffer, PNG or not

    Returns:
        tEXt chunks in order of appearance
    """
    data = as_bytes(png_data)
    chunks: List[TextChunk] = []
    marker_len = len(TEXT_CHUNK_TYPE)
    pos = 0

    while True:
        marker_pos = data.find(TEXT_CHUNK_TYPE, pos)
        if marker_pos == -1:
            break
        pos = marker_pos + marker_len

        if marker_pos < 4:
            continue

        length = read_uint32(data, marker_pos - 4)
        if not 0 < length < MAX_LENIENT_CHUNK_LENGTH:
            logger.debug(f"Lenient scan: rejected length {length} at offset {marker_pos}")
            continue

        data_start = marker_pos + marker_len
        data_end = data_start + length
        if data_end > len(data):
            continue

        keyword_bytes, text_bytes = split_keyword(data[data_start:data_end])
        if text_bytes is None:
            continue

        chunks.append(TextChunk(
            keyword=decode_utf8(keyword_bytes),
            text=decode_utf8(text_bytes),
        ))

    logger.debug(f"Lenient scan found {len(chunks)} tEXt chunk(s) in {len(data)} bytes")
    return chunks
