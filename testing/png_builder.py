"""
Helpers for assembling PNG byte streams in tests.

Chunks are built by hand so tests control every length and CRC field,
including deliberately broken ones.
"""

import base64
import json
import struct
import zlib
from io import BytesIO
from typing import Any, Iterable, Tuple

from PIL import Image, PngImagePlugin

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# 1x1 RGB, 8-bit
IHDR_DATA = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
IDAT_DATA = zlib.compress(b"\x00\xff\x00\x00")


def make_chunk(chunk_type: bytes, data: bytes) -> bytes:
    """Frame data as a PNG chunk with a correct CRC."""
    crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", crc)


def make_text_chunk(keyword: str, text: str) -> bytes:
    return make_chunk(b"tEXt", keyword.encode("utf-8") + b"\x00" + text.encode("utf-8"))


def build_png(*chunks: bytes) -> bytes:
    """Signature + IHDR + the given chunks + IDAT + IEND."""
    return (
        PNG_SIGNATURE
        + make_chunk(b"IHDR", IHDR_DATA)
        + b"".join(chunks)
        + make_chunk(b"IDAT", IDAT_DATA)
        + make_chunk(b"IEND", b"")
    )


def build_text_png(*pairs: Tuple[str, str]) -> bytes:
    return build_png(*(make_text_chunk(keyword, text) for keyword, text in pairs))


def encode_card(card: Any) -> str:
    """Base64 of the card's UTF-8 JSON, as SillyTavern stores it."""
    raw = json.dumps(card, ensure_ascii=False).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def build_card_png(card: Any, keyword: str = "chara") -> bytes:
    return build_text_png((keyword, encode_card(card)))


def build_pillow_png(text_items: Iterable[Tuple[str, str]], size=(4, 4)) -> bytes:
    """Encode a real image with Pillow, attaching tEXt chunks via PngInfo."""
    info = PngImagePlugin.PngInfo()
    for keyword, text in text_items:
        info.add_text(keyword, text)

    output = BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(output, format="PNG", pnginfo=info)
    return output.getvalue()
