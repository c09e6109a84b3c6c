"""
Tests for JSON snapshots and the Markdown report built from them.
"""
import json
import os

import pytest

from dupfinder.core.exceptions import SnapshotError
from dupfinder.core.models import (
    Disposition, DuplicateGroup, DuplicateKind, FileRecord)
from dupfinder.services.report_service import MarkdownReporter
from dupfinder.services.snapshot_service import SnapshotService

NOW = 1_700_000_000.0


@pytest.fixture
def base(tmp_path):
    return str(tmp_path / "root")


@pytest.fixture
def groups(base):
    content = DuplicateGroup(
        kind=DuplicateKind.CONTENT,
        files=[
            FileRecord(path=os.path.join(base, "a.txt"), size=1024, modified=NOW - 60, fingerprint="f" * 64),
            FileRecord(path=os.path.join(base, "sub", "a.txt"), size=1024, modified=NOW - 3 * 86400,
                       fingerprint="f" * 64),
        ],
        total_size=2048,
        reclaimable_bytes=1024,
    )
    name = DuplicateGroup(
        kind=DuplicateKind.NAME,
        files=[
            FileRecord(path=os.path.join(base, "x", "notes.md"), size=10),
            FileRecord(path=os.path.join(base, "y", "notes.md"), size=30),
        ],
        total_size=40,
        reclaimable_bytes=10,
    )
    content.assign(content.files[0].path, Disposition.keep())
    content.assign(content.files[1].path, Disposition.delete())
    return [name, content]


class TestSnapshot:
    """Test saving and loading scan snapshots."""

    def test_save_writes_expected_keys(self, groups, base, tmp_path):
        out = tmp_path / "snap" / "scan.json"
        SnapshotService.save(groups, base, str(out))

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["baseDirectory"] == base
        assert "generatedAt" in data
        assert [g["kind"] for g in data["duplicateGroups"]] == ["name-based", "content-based"]

    def test_load_restores_groups_and_dispositions(self, groups, base, tmp_path):
        out = tmp_path / "scan.json"
        SnapshotService.save(groups, base, str(out))

        loaded, loaded_base = SnapshotService.load(str(out))

        assert loaded_base == base
        assert [g.id for g in loaded] == [g.id for g in groups]
        content = loaded[1]
        assert content.files[0].fingerprint == "f" * 64
        assert content.disposition_for(content.files[1].path) == Disposition.delete()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(SnapshotError, match="Cannot read"):
            SnapshotService.load(str(tmp_path / "nope.json"))

    def test_invalid_json_raises(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")
        with pytest.raises(SnapshotError, match="not valid JSON"):
            SnapshotService.load(str(bad))

    def test_malformed_group_raises(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"duplicateGroups": [{"kind": "content-based"}]}), encoding="utf-8")
        with pytest.raises(SnapshotError, match="malformed group"):
            SnapshotService.load(str(bad))

    def test_missing_base_directory_defaults_to_cwd(self, tmp_path):
        snap = tmp_path / "empty.json"
        snap.write_text(json.dumps({"duplicateGroups": []}), encoding="utf-8")
        assert SnapshotService.load(str(snap)) == ([], ".")


class TestMarkdownReport:
    """Test report layout and content."""

    def test_sections_present(self, groups, base):
        report = MarkdownReporter(now=NOW).render(groups, base)

        for heading in ("# Duplicate Files Report", "## Executive Summary",
                        "📊 **Breakdown by Type:**", "## Cleanup Action Plan", "## Detailed Findings"):
            assert heading in report
        assert f"Directory: `{base}`" in report
        assert "- Duplicate groups found: **2**" in report
        assert "- Content-based duplicates: 1 groups" in report
        assert "- Folder-based duplicates: 0 groups" in report
        assert "Estimated savings: 1.00KB" in report

    def test_group_tables_use_relative_paths_and_actions(self, groups, base):
        report = MarkdownReporter(now=NOW).render(groups, base)

        assert '### Group 1: "notes.md" (2 locations)' in report
        assert "### Group 2: Content Match (2 files)" in report
        assert "**Match:** Files with byte-identical content" in report
        assert "| File Path | Size | Modified | Action |" in report
        assert "| `./x/notes.md` | 10.00B | " in report
        assert "| `./a.txt` | 1.00KB | Today | keep |" in report
        assert "| `./sub/a.txt` | 1.00KB | 3 days ago | delete |" in report
        assert "Pending" in report

    def test_paths_outside_base_stay_absolute(self, tmp_path):
        outside = str(tmp_path / "elsewhere" / "f.txt")
        assert MarkdownReporter._display_path(outside, str(tmp_path / "root")) == outside

    def test_empty_report(self, base):
        report = MarkdownReporter(now=NOW).render([], base)
        assert "- Duplicate groups found: **0**" in report
        assert "### Group" not in report

    def test_write_creates_parent_directories(self, groups, base, tmp_path):
        out = tmp_path / "reports" / "dupes.md"
        MarkdownReporter(now=NOW).write(groups, str(out), base)
        assert out.read_text(encoding="utf-8").startswith("# Duplicate Files Report")
