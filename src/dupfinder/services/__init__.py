"""File operations, mutation/undo and reporting services."""

from .file_service import FileService
from .duplicate_service import DuplicateService
from .undo_service import UndoManager
from .disposition_service import DispositionExecutor
from .snapshot_service import SnapshotService
from .report_service import MarkdownReporter

__all__ = [
    "FileService",
    "DuplicateService",
    "UndoManager",
    "DispositionExecutor",
    "SnapshotService",
    "MarkdownReporter",
]
