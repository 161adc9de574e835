"""
Card Parse Errors
=================

Failures raised while turning PNG bytes into a character record.

Every error is terminal for a single parse attempt. Each carries the keyword of
the chunk involved (when there is one) and a ``context`` dict with byte and
character lengths so callers can build a diagnostic.
"""

from typing import Any, Dict, List, Optional


class CardParseError(Exception):
    """Base exception for character card extraction."""

    def __init__(
        self,
        message: str,
        keyword: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.keyword = keyword
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.keyword is not None:
            parts.append(f"keyword={self.keyword!r}")
        for key, value in self.context.items():
            parts.append(f"{key}={value}")
        return parts[0] if len(parts) == 1 else f"{parts[0]} ({', '.join(parts[1:])})"


class NoTextChunksFound(CardParseError):
    """Neither scan mode found a tEXt chunk."""

    def __init__(self, buffer_length: int):
        super().__init__(
            "No tEXt chunks found in PNG data",
            context={"buffer_length": buffer_length},
        )


class NoCharacterDataFound(CardParseError):
    """tEXt chunks exist but none uses a character card keyword."""

    def __init__(self, keywords: List[str]):
        self.keywords = keywords
        super().__init__(
            "No character card data found in tEXt chunks",
            context={"keywords": keywords},
        )


class EmptyPayload(CardParseError):
    """The matched chunk holds nothing but whitespace."""

    def __init__(self, keyword: str, text_length: int):
        super().__init__(
            "Character card payload is empty",
            keyword=keyword,
            context={"text_length": text_length},
        )


class Base64DecodeError(CardParseError):
    """The payload is not valid base64."""

    def __init__(self, keyword: str, payload_length: int, reason: str):
        super().__init__(
            f"Base64 decoding failed: {reason}",
            keyword=keyword,
            context={"payload_length": payload_length},
        )


class EncodingError(CardParseError):
    """The base64-decoded bytes are not valid UTF-8."""

    def __init__(self, keyword: str, byte_length: int, position: int):
        super().__init__(
            "Decoded payload is not valid UTF-8",
            keyword=keyword,
            context={"byte_length": byte_length, "position": position},
        )


class MalformedJson(CardParseError):
    """The decoded text is not a JSON document."""

    def __init__(self, keyword: str, text_length: int, reason: str):
        super().__init__(
            f"Character card JSON is malformed: {reason}",
            keyword=keyword,
            context={"text_length": text_length},
        )
