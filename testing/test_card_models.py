"""
Tests for CharacterRecord helpers and the CardSummary view.
"""

import json

from chara_inspector.services.character_cards import CharacterRecord


def make_record(card, keyword="chara"):
    return CharacterRecord(card=card, source_keyword=keyword)


class TestCharacterRecord:
    """Test suite for CharacterRecord."""

    def test_data_object_is_used_when_present(self):
        record = make_record({"spec": "chara_card_v2", "data": {"name": "Nova"}})

        assert record.data == {"name": "Nova"}

    def test_whole_card_is_data_when_data_missing(self):
        """Test V1-style flat cards fall back to the top-level object."""
        card = {"name": "Flat", "description": "no data wrapper"}

        assert make_record(card).data == card
        assert make_record(card).summarize().name == "Flat"

    def test_spec_drives_format_label(self):
        assert make_record({"spec": "chara_card_v3", "data": {}}).format_label == "V3 (chara_card_v3)"
        assert make_record({"spec": "chara_card_v2", "data": {}}).format_label == "V2 (chara_card_v2)"
        assert make_record({"data": {}}).format_label == "V2 (chara_card_v2)"
        assert not make_record([1, 2]).is_v3

    def test_to_json_keeps_unicode(self):
        card = {"data": {"name": "测试角色"}}

        text = make_record(card).to_json()

        assert "测试角色" in text
        assert json.loads(text) == card

    def test_suggested_filename(self):
        assert make_record({"data": {"name": "Nova"}}).suggested_filename() == "Nova.json"
        assert make_record({"data": {"name": "测试角色"}}).suggested_filename() == "测试角色.json"
        assert make_record({"data": {"name": 'a/b:c*'}}).suggested_filename() == "abc.json"
        assert make_record({"data": {}}).suggested_filename() == "character.json"
        assert make_record("not a dict").suggested_filename() == "character.json"


class TestCardSummary:
    """Test suite for CharacterRecord.summarize."""

    def test_full_v2_card(self):
        card = {
            "spec": "chara_card_v2",
            "data": {
                "name": "Nova",
                "description": "A helpful guide",
                "personality": "curious",
                "scenario": "a library",
                "first_mes": "Hello!",
                "creator": "someone",
                "character_version": 2,
                "tags": ["friendly", "guide"],
                "character_book": {
                    "entries": [
                        {"keys": ["library"], "comment": "place", "content": "Old and quiet."},
                        "not an entry",
                        {"content": "No keys"},
                    ]
                },
            },
        }

        summary = make_record(card).summarize()

        assert summary.name == "Nova"
        assert summary.first_mes == "Hello!"
        assert summary.character_version == "2"
        assert summary.tags == ["friendly", "guide"]
        assert [entry.keys for entry in summary.character_book] == [["library"], []]
        assert summary.character_book[0].content == "Old and quiet."
        assert summary.character_book[1].comment is None
        assert summary.spec == "chara_card_v2"

    def test_missing_and_mistyped_fields_are_unknown(self):
        """Test absent or wrongly typed fields never make summarizing fail."""
        card = {"spec": "chara_card_v3", "data": {"name": {"nested": True}, "tags": "solo", "character_book": []}}

        summary = make_record(card, "ccv3").summarize()

        assert summary.name is None
        assert summary.description is None
        assert summary.tags == []
        assert summary.character_book == []
        assert summary.format_label == "V3 (chara_card_v3)"

    def test_non_object_cards(self):
        for card in ([1, 2], "text", 42, None):
            summary = make_record(card).summarize()
            assert summary.name is None
            assert summary.tags == []
