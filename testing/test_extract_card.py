"""
Tests for the chara-extract command and image descriptions.
"""

import json

from chara_inspector.extract_card import main
from chara_inspector.services.image_info import describe_image
from png_builder import build_card_png, build_pillow_png, build_png

CARD = {"spec": "chara_card_v2", "data": {"name": "测试角色", "tags": ["a", "b"]}}


class TestExtractCard:
    """Test suite for the extract_card entry point."""

    def test_writes_json_next_to_image(self, tmp_path, capsys):
        image = tmp_path / "card.png"
        image.write_bytes(build_card_png(CARD))

        assert main([str(image)]) == 0

        output = tmp_path / "测试角色.json"
        assert json.loads(output.read_text(encoding="utf-8")) == CARD
        assert "V2 (chara_card_v2)" in capsys.readouterr().out

    def test_explicit_output_path(self, tmp_path):
        image = tmp_path / "card.png"
        image.write_bytes(build_card_png(CARD))
        output = tmp_path / "out.json"

        assert main([str(image), "-o", str(output)]) == 0
        assert json.loads(output.read_text(encoding="utf-8")) == CARD

    def test_summary(self, tmp_path, capsys):
        image = tmp_path / "card.png"
        image.write_bytes(build_card_png(CARD))

        assert main([str(image), "--summary"]) == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["name"] == "测试角色"
        assert summary["tags"] == ["a", "b"]
        assert not (tmp_path / "测试角色.json").exists()

    def test_parse_failure_exits_nonzero(self, tmp_path, capsys):
        image = tmp_path / "plain.png"
        image.write_bytes(build_png())

        assert main([str(image)]) == 1
        assert "NoTextChunksFound" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "absent.png")]) == 1
        assert "cannot read" in capsys.readouterr().err


class TestDescribeImage:
    """Test suite for describe_image."""

    def test_reads_png_header(self):
        info = describe_image(build_pillow_png([], size=(12, 7)), file_name="a.png", has_character_data=True)

        assert info.format == "PNG"
        assert (info.width, info.height) == (12, 7)
        assert info.content_type == "image/png"
        assert info.has_character_data

    def test_unreadable_data_leaves_dimensions_unset(self):
        info = describe_image(b"not an image", file_name="x.bin", content_type="application/octet-stream")

        assert info.size == 12
        assert info.format is None
        assert info.width is None
        assert info.content_type == "application/octet-stream"
