"""
Character Card Reader
====================

Extracts SillyTavern character cards embedded in PNG images as base64-encoded
JSON inside tEXt chunks.

Supports:
- SillyTavern V2 cards (keyword 'chara')
- SillyTavern V3 cards (keyword 'ccv3', preferred when both are present)
- Truncated or partially corrupted PNG streams (lenient marker search)
"""

from .card_reader import find_text_chunks, read_character_card
from .chunk_scanner import (
    MAX_LENIENT_CHUNK_LENGTH,
    TextChunk,
    scan_text_chunks_lenient,
    scan_text_chunks_strict,
)
from .exceptions import (
    Base64DecodeError,
    CardParseError,
    EmptyPayload,
    EncodingError,
    MalformedJson,
    NoCharacterDataFound,
    NoTextChunksFound,
)
from .models import CardSummary, CharacterBookEntry, CharacterRecord, SillyTavernSpec
from .payload_decoder import decode_character_card, select_card_chunk

__all__ = [
    'read_character_card',
    'find_text_chunks',
    'scan_text_chunks_strict',
    'scan_text_chunks_lenient',
    'decode_character_card',
    'select_card_chunk',
    'TextChunk',
    'MAX_LENIENT_CHUNK_LENGTH',
    'CharacterRecord',
    'CardSummary',
    'CharacterBookEntry',
    'SillyTavernSpec',
    'CardParseError',
    'NoTextChunksFound',
    'NoCharacterDataFound',
    'EmptyPayload',
    'Base64DecodeError',
    'EncodingError',
    'MalformedJson',
]
