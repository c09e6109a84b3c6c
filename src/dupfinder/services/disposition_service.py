"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/disposition_service.py
Applies the dispositions assigned to duplicate group members.

Delete: backup → remove → record. The original is never touched before its backup
is complete, and a failure after removal restores it from that backup.
Move / Rename: relocate → record. Neither ever overwrites an existing path.
Each member is handled independently: one failure does not stop its siblings.
"""

import logging
import os
from typing import Iterable, List, Optional

from dupfinder.core.exceptions import DupFinderError, UndoLogError
from dupfinder.core.models import (
    Disposition, DispositionKind, DispositionOutcome, DuplicateGroup, UndoEntry)
from dupfinder.services.file_service import FileService
from dupfinder.services.undo_service import UndoManager

logger = logging.getLogger(__name__)


class DispositionExecutor:
    """Executes keep/delete/move/rename against the filesystem, recording every mutation."""

    def __init__(
        self,
        undo_manager: UndoManager,
        file_service: Optional[FileService] = None,
        use_trash: bool = False
    ):
        self.undo_manager = undo_manager
        self.file_service = file_service or undo_manager.file_service
        self.use_trash = use_trash

    def execute(self, group: DuplicateGroup) -> List[DispositionOutcome]:
        """Apply every assigned disposition of one group, in member order."""
        outcomes = []
        for record in group.files:
            disposition = group.disposition_for(record.path)
            if disposition is None:
                continue
            outcomes.append(self.apply(record.path, disposition))
        return outcomes

    def execute_batch(self, groups: Iterable[DuplicateGroup]) -> List[DispositionOutcome]:
        outcomes = []
        for group in groups:
            outcomes.extend(self.execute(group))
        return outcomes

    def apply(self, path: str, disposition: Disposition) -> DispositionOutcome:
        """Apply one disposition; failures are reported in the outcome, not raised."""
        try:
            entry = self._apply(path, disposition)
        except (DupFinderError, OSError, RuntimeError) as e:
            logger.warning(f"Failed to {disposition.kind.value} {path}: {e}")
            return DispositionOutcome(path=path, disposition=disposition, success=False, error=str(e))

        return DispositionOutcome(
            path=path,
            disposition=disposition,
            success=True,
            undo_entry_id=entry.id if entry else None,
        )

    def _apply(self, path: str, disposition: Disposition) -> Optional[UndoEntry]:
        kind = disposition.kind
        if kind == DispositionKind.KEEP:
            logger.debug(f"Keeping {path}")
            return None
        if kind == DispositionKind.DELETE:
            return self._delete(path)
        if kind == DispositionKind.MOVE:
            os.makedirs(disposition.target, exist_ok=True)
            destination = os.path.join(disposition.target, os.path.basename(os.path.normpath(path)))
            return self._relocate(path, destination, kind)
        if kind == DispositionKind.RENAME:
            destination = os.path.join(os.path.dirname(path), disposition.target)
            return self._relocate(path, destination, kind)
        raise ValueError(f"Unknown disposition kind: {kind!r}")

    def _delete(self, path: str) -> UndoEntry:
        if not os.path.lexists(path):
            raise FileNotFoundError(f"File not found: {path}")

        backup_path = self.undo_manager.create_backup(path)

        try:
            if self.use_trash:
                self.file_service.move_to_trash(path)
            else:
                self.file_service.remove(path)
        except (OSError, RuntimeError):
            self._recover_failed_removal(path, backup_path)
            raise

        entry = UndoEntry(action=DispositionKind.DELETE, original_path=path, backup_path=backup_path)
        try:
            self.undo_manager.record(entry)
        except UndoLogError:
            logger.error(f"Undo log unavailable, restoring {path} from backup")
            self.file_service.copy_durable(backup_path, path)
            self.undo_manager.drop_backup(backup_path)
            raise

        logger.info(f"Deleted {path} (backup: {backup_path})")
        return entry

    def _recover_failed_removal(self, path: str, backup_path: str) -> None:
        """
        A directory removal can fail halfway through. Put back what is already gone;
        the backup is dropped only once the original is complete again.
        """
        try:
            self.file_service.restore_missing(backup_path, path)
        except OSError as e:
            logger.error(f"Could not restore {path} after a failed delete: {e}; backup kept at {backup_path}")
            entry = UndoEntry(action=DispositionKind.DELETE, original_path=path, backup_path=backup_path)
            try:
                self.undo_manager.record(entry)
            except UndoLogError as log_error:
                logger.error(f"Undo log unavailable, backup of {path} is only at {backup_path}: {log_error}")
            return
        self.undo_manager.drop_backup(backup_path)

    def _relocate(self, path: str, destination: str, kind: DispositionKind) -> UndoEntry:
        self.file_service.relocate(path, destination)

        entry = UndoEntry(action=kind, original_path=path, destination_path=destination)
        try:
            self.undo_manager.record(entry)
        except UndoLogError:
            logger.error(f"Undo log unavailable, reverting {kind.value} of {path}")
            self.file_service.relocate(destination, path)
            raise

        logger.info(f"{kind.value.capitalize()}d {path} -> {destination}")
        return entry
