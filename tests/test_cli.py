"""
Tests for the CLI — argument validation, output and the keep-one/undo workflow.
Safety checks here prevent accidental deletion in scripts and pipelines.
"""
import json
import sys
from unittest import mock

import pytest

from dupfinder.cli import CLIApplication, main
from dupfinder.services.undo_service import UndoManager


def run_cli(*argv):
    CLIApplication().run([str(a) for a in argv])


class TestScan:
    """Test the scan sub-command."""

    def test_prints_groups(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "--kinds", "content")

        out = capsys.readouterr().out
        assert f"Scanning directory: {temp_dir.resolve()}" in out
        assert "Found 2 duplicate groups (5 entries)" in out
        assert "| Content |" in out
        assert str(test_files["sub_dup"].resolve()) in out
        assert "Potential space savings:" in out

    def test_no_duplicates(self, temp_dir, data_dir, capsys):
        (temp_dir / "only.txt").write_text("alone")
        run_cli("scan", temp_dir)
        assert "No duplicate groups found." in capsys.readouterr().out

    def test_quiet_suppresses_output(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "-q")
        assert capsys.readouterr().out == ""

    def test_verbose_prints_statistics(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "-v")
        out = capsys.readouterr().out
        assert "Scan Statistics:" in out
        assert "Files scanned:       7" in out

    def test_cli_ignore_patterns_extend_config(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "--kinds", "content", "--ignore", "subdir/")
        out = capsys.readouterr().out
        assert "Found 2 duplicate groups (4 entries)" in out
        assert "dup_in_subdir.txt" not in out

    def test_output_saves_snapshot(self, test_files, temp_dir, data_dir, tmp_path, capsys):
        snapshot = tmp_path / "scan.json"
        run_cli("scan", temp_dir, "--kinds", "content", "-o", snapshot)

        data = json.loads(snapshot.read_text(encoding="utf-8"))
        assert data["baseDirectory"] == str(temp_dir.resolve())
        assert len(data["duplicateGroups"]) == 2
        assert f"Scan result saved to: {snapshot}" in capsys.readouterr().out


class TestScanValidation:
    """Test argument errors exit with code 1."""

    def test_missing_directory(self, temp_dir, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("scan", temp_dir / "nope")
        assert exc.value.code == 1
        assert "Directory not found" in capsys.readouterr().err

    def test_file_is_not_a_directory(self, test_files, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("scan", test_files["unique1"])
        assert exc.value.code == 1
        assert "not a directory" in capsys.readouterr().err

    def test_force_without_keep_one(self, temp_dir, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("scan", temp_dir, "--force")
        assert exc.value.code == 1
        assert "--force can only be used with --keep-one" in capsys.readouterr().err

    def test_use_trash_without_keep_one(self, temp_dir, data_dir, capsys):
        with pytest.raises(SystemExit):
            run_cli("scan", temp_dir, "--use-trash")
        assert "--use-trash can only be used with --keep-one" in capsys.readouterr().err

    def test_negative_depth(self, temp_dir, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("scan", temp_dir, "-d", "-1")
        assert exc.value.code == 1
        assert "cannot be negative" in capsys.readouterr().err

    def test_keep_one_in_non_tty_requires_force(self, test_files, temp_dir, data_dir, capsys):
        with mock.patch("sys.stdin") as fake_stdin:
            fake_stdin.isatty.return_value = False
            with pytest.raises(SystemExit) as exc:
                run_cli("scan", temp_dir, "--keep-one")
        assert exc.value.code == 1
        assert "non-interactive session" in capsys.readouterr().err
        assert test_files["dup1_b"].exists()

    def test_missing_config_file(self, temp_dir, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("scan", temp_dir, "--config", temp_dir / "absent.toml")
        assert exc.value.code == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_unknown_kind_rejected_by_argparse(self, temp_dir, data_dir):
        with pytest.raises(SystemExit) as exc:
            run_cli("scan", temp_dir, "--kinds", "similar")
        assert exc.value.code == 2


class TestKeepOneAndUndo:
    """Test deletion with backups and reverting it."""

    def test_keep_one_force_deletes_and_records(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "--keep-one", "--force")

        out = capsys.readouterr().out
        assert "[KEEP]" in out and "[DEL]" in out
        assert "Successfully deleted 3 files." in out
        assert test_files["dup1_a"].exists()
        assert test_files["dup2_a"].exists()
        assert not test_files["dup1_b"].exists()
        assert not test_files["dup2_b"].exists()
        assert not test_files["sub_dup"].exists()
        assert test_files["unique1"].exists()

        manager = UndoManager(str(data_dir))
        assert len(manager.entries) == 3

    def test_undo_list_and_restore(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "--kinds", "content", "--keep-one", "--force", "-q")
        capsys.readouterr()

        run_cli("undo", "list")
        listing = capsys.readouterr().out
        entry = next(e for e in UndoManager(str(data_dir)).entries
                     if e.original_path == str(test_files["dup2_b"].resolve()))
        assert entry.id in listing
        assert "backup:" in listing

        run_cli("undo", "restore", entry.id)

        assert "Restored" in capsys.readouterr().out
        assert test_files["dup2_b"].read_bytes() == b"B" * 2048
        assert len(UndoManager(str(data_dir)).entries) == 2

    def test_shortest_filename_sort(self, temp_dir, data_dir, capsys):
        (temp_dir / "nested").mkdir()
        (temp_dir / "nested" / "x.txt").write_bytes(b"same")
        (temp_dir / "a_much_longer_name.txt").write_bytes(b"same")

        run_cli("scan", temp_dir, "--keep-one", "--force", "--sort", "shortest-filename")

        assert (temp_dir / "nested" / "x.txt").exists()
        assert not (temp_dir / "a_much_longer_name.txt").exists()
        assert "Reason: shortest filename" in capsys.readouterr().out

    def test_interactive_decline_deletes_nothing(self, test_files, temp_dir, data_dir, capsys):
        with mock.patch("sys.stdin") as fake_stdin, \
                mock.patch.object(sys.stdout, "isatty", return_value=True), \
                mock.patch("builtins.input", return_value="n"):
            fake_stdin.isatty.return_value = True
            run_cli("scan", temp_dir, "--keep-one")

        assert "Deletion cancelled by user." in capsys.readouterr().out
        assert test_files["dup1_b"].exists()
        assert UndoManager(str(data_dir)).entries == []

    def test_no_content_groups(self, temp_dir, data_dir, capsys):
        for d in ("one", "two"):
            (temp_dir / d).mkdir()
            (temp_dir / d / "same_name.txt").write_text(d)
        run_cli("scan", temp_dir, "--keep-one", "--force")
        assert "No content duplicates found" in capsys.readouterr().out

    def test_restore_unknown_id(self, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("undo", "restore", "no-such-id")
        assert exc.value.code == 1
        assert "❌ Error:" in capsys.readouterr().err

    def test_empty_history(self, data_dir, capsys):
        run_cli("undo", "list")
        assert "No undo history." in capsys.readouterr().out

    def test_clear_with_force(self, test_files, temp_dir, data_dir, capsys):
        run_cli("scan", temp_dir, "--keep-one", "--force", "-q")
        run_cli("undo", "clear", "--force")
        assert "Undo history cleared (3 entries)." in capsys.readouterr().out
        assert UndoManager(str(data_dir)).entries == []


class TestReport:
    """Test the report sub-command."""

    def test_report_from_snapshot(self, test_files, temp_dir, data_dir, tmp_path, capsys):
        snapshot = tmp_path / "scan.json"
        report = tmp_path / "out" / "report.md"
        run_cli("scan", temp_dir, "-o", snapshot, "-q")

        run_cli("report", "-i", snapshot, "-o", report)

        text = report.read_text(encoding="utf-8")
        assert text.startswith("# Duplicate Files Report")
        assert "`./subdir/dup_in_subdir.txt`" in text
        assert "Report generated" in capsys.readouterr().out

    def test_missing_snapshot(self, tmp_path, data_dir, capsys):
        with pytest.raises(SystemExit) as exc:
            run_cli("report", "-i", tmp_path / "missing.json", "-o", tmp_path / "r.md")
        assert exc.value.code == 1
        assert "Cannot read snapshot" in capsys.readouterr().err


class TestMain:
    """Test process-level exit codes."""

    def test_keyboard_interrupt_exits_130(self, capsys):
        with mock.patch.object(CLIApplication, "run", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc:
                main()
        assert exc.value.code == 130
        assert "cancelled" in capsys.readouterr().out

    def test_unexpected_error_exits_1(self, capsys, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        with mock.patch.object(CLIApplication, "run", side_effect=ValueError("boom")):
            with pytest.raises(SystemExit) as exc:
                main()
        assert exc.value.code == 1
        assert "Unexpected error: boom" in capsys.readouterr().err
