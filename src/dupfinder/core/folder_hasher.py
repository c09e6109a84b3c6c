"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/folder_hasher.py
Builds an order-independent composite fingerprint for every directory of a walk.

For a directory D the composite is the digest of:
  sorted "file:<path relative to D>:<fingerprint>" for every descendant file, then
  sorted "dir:<name>:<child composite>"             for every immediate child directory
(each entry newline-terminated). Sorting makes the result independent of the order
in which the filesystem listed the entries.

Structures are computed deepest directory first, so a child is always finished
before its parent and deep trees never touch the recursion limit.
"""

import logging
import os
from collections import defaultdict
from typing import Dict, List, Optional

from dupfinder.core.exceptions import HashError
from dupfinder.core.hasher import FingerprinterImpl
from dupfinder.core.interfaces import Fingerprinter
from dupfinder.core.models import FileRecord, FolderStructure

logger = logging.getLogger(__name__)

EMPTY_FILE_MARKER = "empty"
UNREADABLE_FILE_SENTINEL = "unreadable"


class FolderStructureHasher:
    """Computes FolderStructure objects from walker output, sharing the fingerprint cache."""

    def __init__(self, fingerprinter: Optional[Fingerprinter] = None):
        self.fingerprinter = fingerprinter or FingerprinterImpl()

    def build(self, directories: List[FileRecord], files: List[FileRecord]) -> Dict[str, FolderStructure]:
        """
        Build a structure for every directory in `directories`.

        Only records passed in take part: a file or directory whose parent is not in
        `directories` does not contribute to any structure.

        Returns:
            Dict mapping directory path -> FolderStructure
        """
        known = {d.path: d for d in directories}
        direct_files: Dict[str, List[FileRecord]] = defaultdict(list)
        children: Dict[str, List[str]] = defaultdict(list)

        for record in files:
            parent = os.path.dirname(record.path)
            if parent in known:
                direct_files[parent].append(record)

        for path in known:
            parent = os.path.dirname(path)
            if parent in known and parent != path:
                children[parent].append(path)

        # Deepest first: every child is finished before its parent
        order = sorted(known, key=lambda p: p.count(os.sep), reverse=True)

        structures: Dict[str, FolderStructure] = {}
        for path in order:
            structures[path] = self._build_one(
                known[path],
                direct_files.get(path, []),
                [structures[child] for child in children.get(path, [])],
            )

        logger.debug(f"Built {len(structures)} folder structures")
        return structures

    def _build_one(
        self,
        directory: FileRecord,
        direct_files: List[FileRecord],
        child_structures: List[FolderStructure]
    ) -> FolderStructure:
        file_map: Dict[str, str] = {}
        subdirectories: Dict[str, str] = {}
        total_size = 0

        for record in direct_files:
            file_map[record.name] = self._file_fingerprint(record)
            total_size += record.size

        for child in child_structures:
            subdirectories[child.name] = child.composite
            for rel_path, fingerprint in child.files.items():
                file_map[f"{child.name}/{rel_path}"] = fingerprint
            total_size += child.total_size

        return FolderStructure(
            path=directory.path,
            name=directory.name,
            files=file_map,
            subdirectories=subdirectories,
            composite=self.composite_fingerprint(file_map, subdirectories),
            total_size=total_size,
        )

    def composite_fingerprint(self, files: Dict[str, str], subdirectories: Dict[str, str]) -> str:
        file_entries = sorted(f"file:{rel}:{fp}" for rel, fp in files.items())
        dir_entries = sorted(f"dir:{name}:{fp}" for name, fp in subdirectories.items())
        blob = "".join(entry + "\n" for entry in file_entries + dir_entries)
        return self.fingerprinter.digest_text(blob)

    def _file_fingerprint(self, record: FileRecord) -> str:
        if record.size == 0:
            return EMPTY_FILE_MARKER
        try:
            fingerprint = self.fingerprinter.fingerprint(record)
        except HashError as e:
            logger.warning(f"{e}; using placeholder in folder structure")
            return UNREADABLE_FILE_SENTINEL
        return fingerprint or EMPTY_FILE_MARKER
