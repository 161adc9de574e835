"""
Character Card Data Models
=========================

Pydantic models for decoded character cards (SillyTavern V2 and V3 formats).

The decoded card is kept as the raw JSON value; no schema is enforced at parse
time. ``CardSummary`` is a tolerant view over it for display and API responses.
"""

import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SillyTavernSpec(str, Enum):
    """SillyTavern card specification versions."""
    V2 = "chara_card_v2"
    V3 = "chara_card_v3"


class CharacterBookEntry(BaseModel):
    """World info / lorebook entry."""
    keys: List[str] = Field(default_factory=list)
    comment: Optional[str] = None
    content: Optional[str] = None


class CardSummary(BaseModel):
    """Display-oriented view of a character card. Missing fields stay None."""
    name: Optional[str] = None
    description: Optional[str] = None
    personality: Optional[str] = None
    scenario: Optional[str] = None
    first_mes: Optional[str] = None
    creator: Optional[str] = None
    character_version: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    character_book: List[CharacterBookEntry] = Field(default_factory=list)
    spec: str = SillyTavernSpec.V2.value
    format_label: str = ""


class CharacterRecord(BaseModel):
    """A decoded character card and the tEXt keyword it was read from."""
    card: Any
    source_keyword: str

    @property
    def spec(self) -> Optional[str]:
        if isinstance(self.card, dict):
            spec = self.card.get("spec")
            return spec if isinstance(spec, str) else None
        return None

    @property
    def is_v3(self) -> bool:
        return self.spec == SillyTavernSpec.V3.value

    @property
    def data(self) -> Any:
        """The ``data`` object, or the whole card when ``data`` is absent."""
        if isinstance(self.card, dict) and self.card.get("data") is not None:
            return self.card["data"]
        return self.card

    @property
    def format_label(self) -> str:
        spec = SillyTavernSpec.V3 if self.is_v3 else SillyTavernSpec.V2
        return f"{spec.name} ({spec.value})"

    def to_json(self, indent: int = 2) -> str:
        """Serialize the card as pretty-printed JSON, keeping non-ASCII text."""
        return json.dumps(self.card, indent=indent, ensure_ascii=False)

    def suggested_filename(self) -> str:
        """File name for saving the card JSON, based on the character name."""
        name = _text_field(self.data, "name")
        safe = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '', name or "").strip(" .")
        return f"{safe or 'character'}.json"

    def summarize(self) -> CardSummary:
        """Build a CardSummary. Never fails, whatever the card's shape."""
        data = self.data
        return CardSummary(
            name=_text_field(data, "name"),
            description=_text_field(data, "description"),
            personality=_text_field(data, "personality"),
            scenario=_text_field(data, "scenario"),
            first_mes=_text_field(data, "first_mes"),
            creator=_text_field(data, "creator"),
            character_version=_text_field(data, "character_version"),
            tags=_string_list(data.get("tags") if isinstance(data, dict) else None),
            character_book=_book_entries(data),
            spec=SillyTavernSpec.V3.value if self.is_v3 else SillyTavernSpec.V2.value,
            format_label=self.format_label,
        )


def _text_field(data: Any, key: str) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    value = data.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _book_entries(data: Any) -> List[CharacterBookEntry]:
    if not isinstance(data, dict):
        return []
    book = data.get("character_book")
    if not isinstance(book, dict) or not isinstance(book.get("entries"), list):
        return []

    entries = []
    for entry in book["entries"]:
        if not isinstance(entry, dict):
            continue
        entries.append(CharacterBookEntry(
            keys=_string_list(entry.get("keys")),
            comment=_text_field(entry, "comment"),
            content=_text_field(entry, "content"),
        ))
    return entries


def card_metadata(record: CharacterRecord) -> Dict[str, Any]:
    """Short description of a record for logging."""
    return {
        "keyword": record.source_keyword,
        "spec": record.spec,
        "name": _text_field(record.data, "name"),
    }
