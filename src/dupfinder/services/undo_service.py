"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/undo_service.py
Durable undo log and backup store for destructive and relocating mutations.

Layout under the data directory:
    undo-history.json      JSON array of UndoEntry dicts, oldest first
    backups/               <timestamp>_<originalName> copies made before deletes

The log is rewritten atomically (temp file + fsync + os.replace), so a crash leaves
either the previous or the new version on disk, never a torn one.
"""

import contextlib
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from dupfinder.core.exceptions import (
    BackupError, UndoConflictError, UndoLogError, UndoNotFoundError)
from dupfinder.core.models import DispositionKind, UndoEntry
from dupfinder.services.file_service import FileService

logger = logging.getLogger(__name__)

HISTORY_FILE_NAME = "undo-history.json"
BACKUP_DIR_NAME = "backups"


class UndoManager:
    """
    Owns the undo log and the backup directory.
    Single writer: one UndoManager per data directory at a time.
    """

    def __init__(self, base_dir: str, file_service: Optional[FileService] = None):
        self.base_dir = Path(base_dir)
        self.history_path = self.base_dir / HISTORY_FILE_NAME
        self.backup_dir = self.base_dir / BACKUP_DIR_NAME
        self.file_service = file_service or FileService()
        self._entries: List[UndoEntry] = self._load()

    @property
    def entries(self) -> List[UndoEntry]:
        """All entries, oldest first (copy)."""
        return list(self._entries)

    def get(self, entry_id: str) -> UndoEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise UndoNotFoundError(f"No undo entry with id {entry_id}")

    def recent(self, limit: Optional[int] = 10) -> List[UndoEntry]:
        """Newest entries first."""
        ordered = sorted(self._entries, key=lambda e: e.timestamp, reverse=True)
        return ordered if limit is None else ordered[:limit]

    # ---- recording ----

    def create_backup(self, path: str) -> str:
        """
        Durably copy a file or directory into the backup store.
        Returns:
            str: path of the backup
        Raises:
            BackupError: the copy failed; any partial backup has been removed
        """
        backup_path = self._new_backup_path(path)
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            self.file_service.copy_durable(path, backup_path)
        except OSError as e:
            self._remove_quietly(backup_path)
            raise BackupError(path, e) from e

        logger.info(f"Backup created: {path} -> {backup_path}")
        return backup_path

    def drop_backup(self, backup_path: str) -> None:
        """Remove a backup that never made it into the log."""
        self._remove_quietly(backup_path)

    def record(self, entry: UndoEntry) -> UndoEntry:
        """Append an entry and persist the log before returning."""
        self._entries.append(entry)
        try:
            self._save()
        except UndoLogError:
            self._entries.pop()
            raise
        logger.info(f"Undo entry recorded: {entry.id} ({entry.action.value} {entry.original_path})")
        return entry

    # ---- reversal ----

    def undo(self, entry_id: str) -> UndoEntry:
        """
        Reverse one recorded mutation and drop it from the log.

        Raises:
            UndoNotFoundError: unknown id, or the backup/destination is gone
            UndoConflictError: something already exists at the original path
        """
        entry = self.get(entry_id)
        source = entry.backup_path if entry.action == DispositionKind.DELETE else entry.destination_path

        if not source or not os.path.lexists(source):
            raise UndoNotFoundError(f"Cannot undo {entry.id}: {source} no longer exists")
        if os.path.lexists(entry.original_path):
            raise UndoConflictError(
                f"Cannot undo {entry.id}: {entry.original_path} already exists")

        parent = os.path.dirname(entry.original_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        if entry.action == DispositionKind.DELETE:
            try:
                self.file_service.copy_durable(source, entry.original_path)
            except OSError:
                self._remove_quietly(entry.original_path)
                raise
            self._remove_quietly(source)
            logger.info(f"Restored from backup: {entry.original_path}")
        else:
            self.file_service.relocate(source, entry.original_path)
            logger.info(f"Moved back: {source} -> {entry.original_path}")

        self._entries.remove(entry)
        self._save()
        return entry

    def discard(self, entry_id: str) -> UndoEntry:
        """Forget an entry without reversing it; its backup (if any) is deleted."""
        entry = self.get(entry_id)
        self._entries.remove(entry)
        self._save()
        if entry.backup_path:
            self._remove_quietly(entry.backup_path)
        logger.info(f"Undo entry discarded: {entry.id}")
        return entry

    def clear(self) -> int:
        """
        Delete every backup (best effort) and empty the log.
        Returns:
            int: number of entries dropped
        """
        count = len(self._entries)
        for entry in self._entries:
            if entry.backup_path:
                self._remove_quietly(entry.backup_path)
        self._entries = []
        self._save()
        logger.info(f"Undo history cleared ({count} entries)")
        return count

    # ---- persistence ----

    def _load(self) -> List[UndoEntry]:
        if not self.history_path.exists():
            logger.debug("Starting with empty undo history")
            return []
        try:
            with open(self.history_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            entries = [UndoEntry.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise UndoLogError(f"Cannot read undo log {self.history_path}: {e}") from e
        logger.debug(f"Undo history loaded: {len(entries)} entries")
        return entries

    def _save(self) -> None:
        payload = [entry.to_dict() for entry in self._entries]
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".undo-history-", suffix=".tmp", dir=str(self.base_dir))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.history_path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise UndoLogError(f"Cannot write undo log {self.history_path}: {e}") from e

    def _new_backup_path(self, path: str) -> str:
        name = os.path.basename(os.path.normpath(path))
        now = datetime.now(timezone.utc)
        # ISO-8601 with ':' and '.' replaced, e.g. 2025-01-31T12-30-05-123Z
        stamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"

        candidate = self.backup_dir / f"{stamp}_{name}"
        counter = 1
        while os.path.lexists(candidate):
            candidate = self.backup_dir / f"{stamp}-{counter}_{name}"
            counter += 1
        return str(candidate)

    def _remove_quietly(self, path: str) -> None:
        if not os.path.lexists(path):
            return
        try:
            self.file_service.remove(path)
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")
