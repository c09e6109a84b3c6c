"""
Tests for FileService — durable copies and relocation that never overwrites.
"""
import os
from unittest import mock

import pytest

from dupfinder.services.file_service import FileService


class TestCopyDurable:
    """Test byte-identical copies."""

    def test_copies_file_and_fsyncs(self, tmp_path):
        src = tmp_path / "src.bin"
        src.write_bytes(os.urandom(2048))
        dst = tmp_path / "dst.bin"

        with mock.patch("dupfinder.services.file_service.os.fsync", wraps=os.fsync) as spy:
            FileService.copy_durable(str(src), str(dst))

        assert dst.read_bytes() == src.read_bytes()
        spy.assert_called_once()

    def test_copies_directory_tree(self, tmp_path):
        src = tmp_path / "tree"
        (src / "a" / "b").mkdir(parents=True)
        (src / "empty_dir").mkdir()
        (src / "top.txt").write_text("top")
        (src / "a" / "b" / "deep.txt").write_text("deep")
        dst = tmp_path / "copy"

        FileService.copy_durable(str(src), str(dst))

        assert (dst / "top.txt").read_text() == "top"
        assert (dst / "a" / "b" / "deep.txt").read_text() == "deep"
        assert (dst / "empty_dir").is_dir()

    def test_refuses_existing_target(self, tmp_path):
        src = tmp_path / "src.txt"
        dst = tmp_path / "dst.txt"
        src.write_text("new")
        dst.write_text("old")

        with pytest.raises(FileExistsError):
            FileService.copy_durable(str(src), str(dst))
        assert dst.read_text() == "old"

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileService.copy_durable(str(tmp_path / "nope"), str(tmp_path / "dst"))


class TestRestoreMissing:
    """Test completing a partly removed tree from its backup."""

    def test_fills_in_only_missing_entries(self, tmp_path):
        backup = tmp_path / "backup"
        (backup / "sub").mkdir(parents=True)
        (backup / "a.txt").write_text("a")
        (backup / "sub" / "b.txt").write_text("b")
        partial = tmp_path / "original"
        partial.mkdir()
        (partial / "a.txt").write_text("a, edited after backup")

        FileService.restore_missing(str(backup), str(partial))

        assert (partial / "a.txt").read_text() == "a, edited after backup"
        assert (partial / "sub" / "b.txt").read_text() == "b"

    def test_missing_target_is_copied_whole(self, tmp_path):
        backup = tmp_path / "backup.txt"
        backup.write_text("x")
        FileService.restore_missing(str(backup), str(tmp_path / "gone.txt"))
        assert (tmp_path / "gone.txt").read_text() == "x"


class TestRelocateAndRemove:
    """Test move/rename and permanent removal."""

    def test_relocate_moves_file(self, tmp_path):
        src = tmp_path / "a.txt"
        src.write_text("x")
        dst = tmp_path / "sub"
        dst.mkdir()

        FileService.relocate(str(src), str(dst / "a.txt"))

        assert not src.exists()
        assert (dst / "a.txt").read_text() == "x"

    def test_relocate_never_overwrites(self, tmp_path):
        src = tmp_path / "a.txt"
        dst = tmp_path / "b.txt"
        src.write_text("a")
        dst.write_text("b")

        with pytest.raises(FileExistsError):
            FileService.relocate(str(src), str(dst))
        assert src.read_text() == "a" and dst.read_text() == "b"

    def test_relocate_missing_source(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileService.relocate(str(tmp_path / "nope"), str(tmp_path / "dst"))

    def test_remove_file_and_tree(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        d = tmp_path / "d"
        (d / "inner").mkdir(parents=True)
        (d / "inner" / "g.txt").write_text("y")

        FileService.remove(str(f))
        FileService.remove(str(d))

        assert not f.exists() and not d.exists()


class TestMoveToTrash:
    """Test the send2trash integration."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileService.move_to_trash(str(tmp_path / "nope.txt"))

    def test_calls_send2trash_with_resolved_path(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        with mock.patch("dupfinder.services.file_service.send2trash") as mock_trash:
            FileService.move_to_trash(str(f))
        mock_trash.assert_called_once_with(str(f.resolve()))

    def test_trash_failure_is_wrapped(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_text("x")
        with mock.patch("dupfinder.services.file_service.send2trash", side_effect=OSError("no trash")):
            with pytest.raises(RuntimeError, match="Failed to move to trash"):
                FileService.move_to_trash(str(f))
