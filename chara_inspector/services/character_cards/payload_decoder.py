"""
Character Payload Decoder
=========================

Selects the character card chunk from a set of tEXt chunks and decodes it.

SillyTavern stores the card JSON base64-encoded under the ``chara`` keyword (V2)
or ``ccv3`` (V3). When both are present the V3 chunk wins.
"""

import base64
import binascii
import json
import logging
import re
from typing import Any, Optional, Sequence

from .chunk_scanner import TextChunk
from .exceptions import (
    Base64DecodeError,
    EmptyPayload,
    EncodingError,
    MalformedJson,
    NoCharacterDataFound,
)
from .models import CharacterRecord

logger = logging.getLogger(__name__)

# Highest priority first
CARD_KEYWORDS = ("ccv3", "chara")

_WHITESPACE = re.compile(r"\s+")


def select_card_chunk(chunks: Sequence[TextChunk]) -> TextChunk:
    """
    Pick the chunk holding the character card.

    Keywords are compared case-insensitively. Within a keyword, the first
    chunk in sequence order is used.

    Raises:
        NoCharacterDataFound: If no chunk uses a card keyword
    """
    for keyword in CARD_KEYWORDS:
        chunk = find_chunk(chunks, keyword)
        if chunk is not None:
            logger.debug(f"Selected '{chunk.keyword}' chunk ({len(chunk.text)} chars)")
            return chunk

    raise NoCharacterDataFound([chunk.keyword for chunk in chunks])


def decode_base64_payload(text: str, keyword: str) -> bytes:
    """
    Decode a base64 payload the way browsers' ``atob`` does.

    Whitespace anywhere in the payload is ignored and missing ``=`` padding is
    restored. Characters outside the base64 alphabet, or a length that cannot
    be padded, fail.

    Raises:
        EmptyPayload: If nothing is left after removing whitespace
        Base64DecodeError: If the payload is not valid base64
    """
    cleaned = _WHITESPACE.sub("", text)
    if not cleaned:
        raise EmptyPayload(keyword, len(text))

    missing = -len(cleaned) % 4
    if missing in (1, 2) and "=" not in cleaned:
        cleaned += "=" * missing

    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(keyword, len(cleaned), str(e)) from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_card_json(raw: bytes, keyword: str) -> Any:
    """
    Decode UTF-8 bytes and parse them as JSON.

    Raises:
        EncodingError: If the bytes are not valid UTF-8
        MalformedJson: If the text is not valid JSON
    """
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise EncodingError(keyword, len(raw), e.start) from e

    logger.debug(f"Decoded payload preview: {text[:100]!r}")

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise MalformedJson(keyword, len(text), str(e)) from e


def decode_character_card(chunks: Sequence[TextChunk]) -> CharacterRecord:
    """
    Select, base64-decode and JSON-parse the character card chunk.

    Args:
        chunks: tEXt chunks in scan order

    Returns:
        CharacterRecord wrapping the parsed JSON value

    Raises:
        CardParseError: One of its subclasses, describing the failing stage
    """
    chunk = select_card_chunk(chunks)
    raw = decode_base64_payload(chunk.text, chunk.keyword)
    card = parse_card_json(raw, chunk.keyword)
    return CharacterRecord(card=card, source_keyword=chunk.keyword)


def find_chunk(chunks: Sequence[TextChunk], keyword: str) -> Optional[TextChunk]:
    """Return the first chunk whose keyword matches case-insensitively."""
    keyword = keyword.lower()
    for chunk in chunks:
        if chunk.keyword.lower() == keyword:
            return chunk
    return None
