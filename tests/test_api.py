"""Tests for the build_suggestions pipeline."""

import os

import pytest

from ghost_patch import (
    Config, DocumentRequiredError, Range, StreamingResponseParser, StringDocument,
    SuggestionContext, build_suggestions, finish_stream,
)
from ghost_patch.editing.change_parser import ResponseFormat
from ghost_patch.editing.suggestions import GroupKind


SOURCE = """\
import { db } from "./db";

export function getUser(id: string) {
  return db.find(id);
}

export function removeUser(id: string) {
  db.remove(id);
}
"""

SEARCH_REPLACE_RESPONSE = """\
<change>
<search><![CDATA[  return db.find(id);]]></search>
<replace><![CDATA[  if (!id) {
    return null;
  }
  return db.find(id);]]></replace>
</change>
<change>
<search><![CDATA[  db.remove(id);]]></search>
<replace><![CDATA[  db.remove(id);
  db.flush();]]></replace>
</change>
"""


def _context(text=SOURCE, selection=None, config=None):
    doc = StringDocument(text, uri="file:///src/users.ts", language_id="typescript")
    return SuggestionContext(document=doc, selection=selection, config=config or Config())


class TestBuildSuggestions:
    def test_search_replace_response(self):
        result = build_suggestions(SEARCH_REPLACE_RESPONSE, _context())

        assert result.has_suggestions()
        assert result.parsed.format is ResponseFormat.SEARCH_REPLACE
        assert len(result.apply_result.applied) == 2
        assert "db.flush();" in result.modified_content

        primary = result.primary_file
        assert primary.uri == "file:///src/users.ts"
        assert len(primary.groups) == 2
        assert primary.groups[0].kind is GroupKind.ADDITION
        assert primary.selected_group_index == 0

    def test_operations_reproduce_modified_content(self):
        result = build_suggestions(SEARCH_REPLACE_RESPONSE, _context())
        assert result.primary_file.apply_to(SOURCE) == result.modified_content

    def test_selection_selects_closest_group(self):
        result = build_suggestions(
            SEARCH_REPLACE_RESPONSE, _context(selection=Range.from_lines(8)),
        )
        assert result.primary_file.selected_group_index == 1

    def test_unrecognized_response(self):
        result = build_suggestions("Sorry, nothing to change here.", _context())
        assert not result.has_suggestions()
        assert len(result.store) == 0
        assert result.primary_file is None
        assert result.modified_content == SOURCE

    def test_empty_response(self):
        result = build_suggestions("", _context())
        assert not result.has_suggestions()
        assert len(result.store) == 0

    def test_unlocatable_change_gives_no_suggestions(self):
        response = (
            "<change><search><![CDATA[does_not_exist();]]></search>"
            "<replace><![CDATA[x();]]></replace></change>"
        )
        result = build_suggestions(response, _context())
        assert not result.has_suggestions()
        assert len(result.apply_result.dropped) == 1

    def test_document_required(self):
        with pytest.raises(DocumentRequiredError):
            build_suggestions(SEARCH_REPLACE_RESPONSE, SuggestionContext(document=None))


class TestFullBlock:
    def test_full_block_keeps_trailing_newline(self):
        response = "src/users.ts\n```ts\n" + SOURCE.replace("db.find", "db.get").rstrip("\n") + "\n```"
        result = build_suggestions(response, _context())

        assert result.parsed.format is ResponseFormat.FULL_BLOCK
        assert result.apply_result is None
        assert result.modified_content == SOURCE.replace("db.find", "db.get")
        assert len(result.primary_file.groups) == 1
        assert result.primary_file.groups[0].kind is GroupKind.EDIT

    def test_trailing_newline_preservation_can_be_disabled(self):
        config = Config({"preserve_trailing_newline": False})
        response = "```\n" + SOURCE.rstrip("\n") + "\n```"
        result = build_suggestions(response, _context(config=config))
        assert result.modified_content == SOURCE.rstrip("\n")
        assert result.has_suggestions()

    def test_identical_full_block(self):
        response = "```ts\n" + SOURCE.rstrip("\n") + "\n```"
        result = build_suggestions(response, _context())
        assert not result.has_suggestions()


class TestGroupGapConfig:
    def test_larger_gap_merges_groups(self):
        config = Config({"group_max_gap": 10})
        result = build_suggestions(SEARCH_REPLACE_RESPONSE, _context(config=config))
        assert len(result.primary_file.groups) == 1


class TestStreamingAndMetrics:
    def test_finish_stream(self):
        stream = StreamingResponseParser()
        for i in range(0, len(SEARCH_REPLACE_RESPONSE), 16):
            stream.feed(SEARCH_REPLACE_RESPONSE[i:i + 16])
        result = finish_stream(stream, _context())
        assert len(result.primary_file.groups) == 2

    def test_metrics_written_when_enabled(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = Config({"metrics_enabled": True, "metrics_dir": "m"})
        build_suggestions(SEARCH_REPLACE_RESPONSE, _context(config=config))
        assert os.path.isfile(tmp_path / "m" / "suggestion_metrics.jsonl")

    def test_metrics_off_by_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("GHOSTPATCH_METRICS_ENABLED", raising=False)
        build_suggestions(SEARCH_REPLACE_RESPONSE, _context(config=Config()))
        assert not os.path.exists(tmp_path / ".ghostpatch")
