"""Tests for flow.text.cli -- the flow-text command line."""

from __future__ import annotations

import io
import json

import pytest

from flow.text.cli import build_parser, main


@pytest.fixture
def settings_path(tmp_path) -> str:
    return str(tmp_path / "editor.json")


@pytest.fixture
def description(tmp_path) -> str:
    path = tmp_path / "desc.md"
    path.write_text("Buy **milk** #groceries\n\n- [ ] eggs\n", encoding="utf-8")
    return str(path)


class TestParser:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_preview_defaults(self) -> None:
        args = build_parser().parse_args(["preview"])
        assert args.file == "-"
        assert args.width == 80
        assert not args.fetch_images


class TestCommands:
    def test_scan_prints_json(self, capsys, settings_path, description) -> None:
        assert main(["--settings", settings_path, "scan", description]) == 0
        out = json.loads(capsys.readouterr().out)
        assert [(m["kind"], m["fullText"]) for m in out] == [
            ("bold", "**milk**"),
            ("hashtag", "#groceries"),
        ]

    def test_scan_image_index(self, capsys, monkeypatch, settings_path) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("[img4] [img...]"))
        main(["--settings", settings_path, "scan"])
        out = json.loads(capsys.readouterr().out)
        assert [m["imageIndex"] for m in out] == [4, None]

    def test_annotate_plain_is_lossless(self, capsys, settings_path, description) -> None:
        main(["--settings", settings_path, "annotate", "--plain", description])
        with open(description, encoding="utf-8") as f:
            assert capsys.readouterr().out == f.read()

    def test_preview_plain(self, capsys, settings_path, description) -> None:
        main(["--settings", settings_path, "preview", "--plain", description])
        assert capsys.readouterr().out.splitlines() == ["Buy milk #groceries", "", "[ ] eggs"]

    def test_fetch_images_without_task(self, capsys, monkeypatch, settings_path) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("[img1]"))
        main(["--settings", settings_path, "preview", "--plain", "--fetch-images"])
        assert capsys.readouterr().out.splitlines() == ["[image 1 unavailable]"]


class TestSuggest:
    @pytest.fixture
    def tags_file(self, tmp_path) -> str:
        path = tmp_path / "tags.json"
        tags = [
            {"id": "1", "name": "Groceries", "full_path": "Groceries", "depth": 0},
            {
                "id": "2",
                "name": "Work",
                "full_path": "Work",
                "depth": 0,
                "children": [
                    {"id": "3", "name": "Meetings", "parent_id": "2", "full_path": "Work/Meetings", "depth": 1},
                ],
            },
        ]
        path.write_text(json.dumps({"success": True, "data": tags}), encoding="utf-8")
        return str(path)

    def test_ranked_and_truncated(self, capsys, settings_path, tags_file) -> None:
        assert main(["--settings", settings_path, "suggest", tags_file, "#wo", "--width", "12"]) == 0
        assert capsys.readouterr().out.splitlines() == ["#Work", "#Work/Mee..."]

    def test_limit_from_settings(self, capsys, tmp_path, tags_file) -> None:
        settings = tmp_path / "limited.json"
        settings.write_text(json.dumps({"maxSuggestions": 1}), encoding="utf-8")
        main(["--settings", str(settings), "suggest", tags_file, ""])
        assert capsys.readouterr().out.splitlines() == ["#Groceries"]
