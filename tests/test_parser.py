# Copyright (c) Syntropy Systems
"""Tests for result file parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import make_layout, make_result

from parkgallery.models.result import UNKNOWN_MODEL
from parkgallery.parser import (
    NoResultFilesError,
    ResultParseError,
    display_stem,
    load_batch,
    parse_batch,
    parse_result,
    read_result_files,
)


class TestParseResult:
    """Tests for parse_result."""

    def test_parse_string_encoded_layout(self) -> None:
        """Test scenario.trees given as a JSON string."""
        rec = parse_result(json.dumps(make_result("3,1")), "a.json")
        assert rec.removal_ids == [1, 3]
        assert rec.raw_removals == "3,1"
        assert len(rec.layout.trees) == 4
        assert rec.display_stem == "a"
        assert rec.model == "gpt-4o"
        assert rec.meta_tag == "run-a"
        assert rec.timestamp == "2024-05-01T10:00:00Z"
        assert rec.csv_hash == "abc123"

    def test_parse_embedded_layout(self) -> None:
        """Test scenario.trees given as an object parses the same."""
        embedded = parse_result(make_result("1", embed_as_string=False), "a.json")
        encoded = parse_result(make_result("1"), "a.json")
        assert embedded.layout == encoded.layout

    def test_defaults_for_missing_sections(self) -> None:
        """Test missing llm/meta/result blocks degrade to defaults."""
        payload = {"scenario": {"trees": json.dumps(make_layout())}}
        rec = parse_result(payload, "bare.json")
        assert rec.model == UNKNOWN_MODEL
        assert rec.hint_mode == ""
        assert rec.meta_tag == ""
        assert rec.timestamp is None
        assert rec.removal_ids == []

    def test_null_sections(self) -> None:
        """Test explicit nulls behave like missing sections."""
        payload = {
            "scenario": {"trees": make_layout()},
            "result": None,
            "meta": None,
            "llm": None,
        }
        rec = parse_result(payload, "nulls.json")
        assert rec.model == UNKNOWN_MODEL

    def test_numeric_timestamp(self) -> None:
        """Test numeric timestamps are stringified."""
        rec = parse_result(make_result(timestamp=1714557600), "n.json")  # type: ignore[arg-type]
        assert rec.timestamp == "1714557600"

    def test_hint_mode(self) -> None:
        """Test hint mode is read from the scenario block."""
        rec = parse_result(make_result(hint_mode="clusters"), "h.json")
        assert rec.hint_mode == "clusters"

    def test_invalid_json(self) -> None:
        """Test unparsable file content."""
        with pytest.raises(ResultParseError) as exc:
            _ = parse_result("{not json", "bad.json")
        assert exc.value.source_file == "bad.json"
        assert "invalid JSON" in exc.value.reason

    def test_unparsable_trees_string(self) -> None:
        """Test scenario.trees holding a broken JSON string."""
        payload = make_result()
        payload["scenario"]["trees"] = "{{broken"  # type: ignore[index]
        with pytest.raises(ResultParseError, match="scenario.trees"):
            _ = parse_result(payload, "bad.json")

    def test_missing_trees(self) -> None:
        """Test a scenario without trees."""
        with pytest.raises(ResultParseError, match="missing"):
            _ = parse_result({"scenario": {}}, "bad.json")

    def test_missing_scenario(self) -> None:
        """Test a file without a scenario block."""
        with pytest.raises(ResultParseError):
            _ = parse_result({"result": {}}, "bad.json")

    def test_top_level_not_object(self) -> None:
        """Test a JSON array at the top level."""
        with pytest.raises(ResultParseError, match="object"):
            _ = parse_result("[1, 2]", "bad.json")

    def test_bytes_not_utf8(self) -> None:
        """Test undecodable bytes are reported as a parse error."""
        with pytest.raises(ResultParseError, match="invalid JSON"):
            _ = parse_result(b'{"scenario": "\xff"}', "bad.json")

    def test_deeply_nested_trees_string(self) -> None:
        """Test a pathologically nested trees string is a parse error."""
        payload = make_result()
        payload["scenario"]["trees"] = "[" * 100000  # type: ignore[index]
        with pytest.raises(ResultParseError, match="scenario.trees"):
            _ = parse_result(payload, "deep.json")


class TestParseBatch:
    """Tests for batch parsing and file selection."""

    def test_failures_do_not_abort(self) -> None:
        """Test bad files are collected while good ones parse."""
        records, failures = parse_batch(
            [
                ("a.json", json.dumps(make_result("1"))),
                ("bad.json", "{oops"),
                ("b.json", json.dumps(make_result("2"))),
            ]
        )
        assert [r.source_file for r in records] == ["a.json", "b.json"]
        assert [r.batch_index for r in records] == [0, 1]
        assert len(failures) == 1
        assert failures[0].source_file == "bad.json"

    def test_decode_failures_do_not_abort(self) -> None:
        """Test encoding and nesting errors are collected like bad JSON."""
        deep = make_result()
        deep["scenario"]["trees"] = "[" * 100000  # type: ignore[index]
        records, failures = parse_batch(
            [
                ("good.json", json.dumps(make_result("1"))),
                ("binary.json", b'{"scenario": "\xff"}'),
                ("deep.json", json.dumps(deep)),
            ]
        )
        assert [r.source_file for r in records] == ["good.json"]
        assert [f.source_file for f in failures] == ["binary.json", "deep.json"]

    def test_display_stem(self) -> None:
        """Test only a trailing .json is stripped."""
        assert display_stem("[a][b] run.json") == "[a][b] run"
        assert display_stem("notes.json.txt") == "notes.json.txt"

    def test_read_result_files_skips_non_json(self, temp_dir: Path) -> None:
        """Test non-JSON paths are skipped and directories expanded."""
        (temp_dir / "b.json").write_text("{}")
        (temp_dir / "a.json").write_text("{}")
        (temp_dir / "readme.txt").write_text("hi")
        other = temp_dir / "c.png"
        other.write_bytes(b"")

        selected = read_result_files([temp_dir, other])
        assert [p.name for p in selected] == ["a.json", "b.json"]

    def test_no_json_files(self, temp_dir: Path) -> None:
        """Test a batch without JSON files is rejected up front."""
        txt = temp_dir / "x.txt"
        txt.write_text("")
        with pytest.raises(NoResultFilesError):
            _ = read_result_files([txt])

    def test_load_batch(self, write_results) -> None:
        """Test reading and parsing from disk."""
        paths = write_results(
            {
                "one.json": make_result("1,2"),
                "two.json": {"scenario": {"trees": "nope"}},
            }
        )
        records, failures = load_batch(paths)
        assert [r.source_file for r in records] == ["one.json"]
        assert [f.source_file for f in failures] == ["two.json"]
