"""
Character Card Reader
====================

Entry point for extracting a character card from PNG bytes.

The lenient scan runs first. The strict scan is only consulted when the lenient
scan finds nothing, so lenient results always take precedence, even when the
strict walk would have found a different set of chunks.
"""

import logging
from typing import List

from .byte_reader import BytesLike, as_bytes, has_png_signature
from .chunk_scanner import TextChunk, scan_text_chunks_lenient, scan_text_chunks_strict
from .exceptions import NoTextChunksFound
from .models import CharacterRecord, card_metadata
from .payload_decoder import decode_character_card

logger = logging.getLogger(__name__)


def find_text_chunks(png_data: BytesLike) -> List[TextChunk]:
    """
    Collect tEXt chunks, lenient scan first with strict scan as fallback.

    Never raises; returns an empty list when neither scan finds anything.
    """
    data = as_bytes(png_data)

    chunks = scan_text_chunks_lenient(data)
    if not chunks:
        logger.debug("Lenient scan found no tEXt chunks, trying strict scan")
        chunks = scan_text_chunks_strict(data)

    return chunks


def read_character_card(png_data: BytesLike) -> CharacterRecord:
    """
    Extract and decode the character card embedded in PNG bytes.

    Args:
        png_data: Complete PNG file contents (or a buffer containing one)

    Returns:
        CharacterRecord with the parsed card JSON

    Raises:
        NoTextChunksFound: If the buffer has no tEXt chunks
        NoCharacterDataFound: If no chunk uses the 'ccv3' or 'chara' keyword
        EmptyPayload: If the selected chunk is blank
        Base64DecodeError: If the payload is not base64
        EncodingError: If the decoded payload is not UTF-8
        MalformedJson: If the decoded payload is not JSON
    """
    data = as_bytes(png_data)
    logger.debug(f"Reading character card from {len(data)} bytes")

    if not has_png_signature(data):
        logger.debug("Buffer does not start with a PNG signature, scanning anyway")

    chunks = find_text_chunks(data)
    if not chunks:
        raise NoTextChunksFound(len(data))

    logger.debug(
        "Found tEXt chunks: "
        + ", ".join(f"{chunk.keyword} ({len(chunk.text)} chars)" for chunk in chunks)
    )

    record = decode_character_card(chunks)
    logger.info(f"Decoded character card: {card_metadata(record)}")
    return record
