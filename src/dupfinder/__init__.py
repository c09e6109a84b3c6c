"""
dupfinder — duplicate file and folder finder with reversible cleanup.

Core features:
- Three independent grouping passes: NAME (same base name), CONTENT (SHA-256), FOLDER (recursive structure)
- .gitignore-style ignore rules composed across every ancestor directory
- Every delete is backed up first; deletes, moves and renames can be undone
- CLI interface with Markdown reports
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("dupfinder")
except PackageNotFoundError:
    import tomllib
    from pathlib import Path

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from dupfinder.commands import ScanCommand
from dupfinder.core import (
    AppConfig, ScanOptions, DuplicateKind, SortOrder, FileRecord, DuplicateGroup, Disposition)
from dupfinder.utils.convert_utils import ConvertUtils
from dupfinder.services import (
    DuplicateService, DispositionExecutor, UndoManager, MarkdownReporter, SnapshotService)
from dupfinder.services.file_service import FileService

__all__ = [
    "ScanCommand",
    "AppConfig",
    "ScanOptions",
    "DuplicateKind",
    "SortOrder",
    "FileRecord",
    "DuplicateGroup",
    "Disposition",
    "ConvertUtils",
    "DuplicateService",
    "DispositionExecutor",
    "UndoManager",
    "MarkdownReporter",
    "SnapshotService",
    "FileService",
    "__version__",
]
