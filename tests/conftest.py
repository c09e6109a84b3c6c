"""
Shared fixtures for dupfinder tests.
Creates isolated temporary directories with controlled test trees.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so 'dupfinder' is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from dupfinder.core.models import FileRecord


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 2 identical files + 1 identical copy in a subdirectory (content group of 3)
    - 2 identical files of another content (content group of 2)
    - 1 unique file
    - 1 empty file (never fingerprinted)
    """
    files = {}

    # Content group #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Content group #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique file
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)

    # Empty file
    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Subdirectory with a third copy of content A
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


@pytest.fixture
def folder_tree(temp_dir) -> Dict[str, Path]:
    """
    Two identical folder trees plus one that differs by a single byte:

        photos/a.jpg, photos/raw/b.raw
        backup/photos_copy/a.jpg, backup/photos_copy/raw/b.raw
        other/a.jpg, other/raw/b.raw          (b.raw differs)
    """
    paths = {}
    for key, rel, tail in (
            ("photos", "photos", b"1"),
            ("copy", "backup/photos_copy", b"1"),
            ("other", "other", b"2")):
        root = temp_dir / rel
        (root / "raw").mkdir(parents=True)
        (root / "a.jpg").write_bytes(b"jpeg-bytes" * 10)
        (root / "raw" / "b.raw").write_bytes(b"raw-bytes" * 20 + tail)
        paths[key] = root
    return paths


@pytest.fixture
def data_dir(tmp_path, monkeypatch) -> Path:
    """Points DUPFINDER_HOME at an isolated directory (undo log, backups, config)."""
    home = tmp_path / "dupfinder-home"
    monkeypatch.setenv("DUPFINDER_HOME", str(home))
    return home


def make_record(path, size=None, is_directory=False) -> FileRecord:
    """Builds a FileRecord for an existing path (or a synthetic one when size is given)."""
    path = Path(path)
    if size is None:
        size = 0 if is_directory else path.stat().st_size
    return FileRecord(path=str(path), size=size, is_directory=is_directory)
