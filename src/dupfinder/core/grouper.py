"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements the three independent grouping passes using FileRecord objects.

NAME     exact, case-sensitive base name     reclaimable = total - largest member
CONTENT  full content fingerprint            reclaimable = total - first member
FOLDER   composite structure fingerprint     reclaimable = total - largest member

Members of every group are ordered by path, which makes "first member" deterministic
across runs regardless of filesystem enumeration order. Groups within one pass are
ordered by their first member's path.

The content pass narrows candidates before reading whole files:
size → front-chunk hash (files larger than one chunk) → full fingerprint.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from dupfinder.core.exceptions import HashError
from dupfinder.core.folder_hasher import FolderStructureHasher
from dupfinder.core.hasher import FingerprinterImpl, FRONT_CHUNK_SIZE
from dupfinder.core.interfaces import DuplicateGrouper, Fingerprinter
from dupfinder.core.models import DuplicateGroup, DuplicateKind, FileRecord, ScanResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateGrouperImpl(DuplicateGrouper):
    """
    A concrete implementation of DuplicateGrouper.
    Uses an injected Fingerprinter (shared with the folder hasher) for flexibility and testability.
    """

    def __init__(
        self,
        fingerprinter: Optional[Fingerprinter] = None,
        folder_hasher: Optional[FolderStructureHasher] = None,
        prefilter_threshold: int = FRONT_CHUNK_SIZE
    ):
        self.fingerprinter = fingerprinter or FingerprinterImpl()
        self.folder_hasher = folder_hasher or FolderStructureHasher(self.fingerprinter)
        self.prefilter_threshold = prefilter_threshold

    def find_duplicates(
        self,
        scan: ScanResult,
        kinds: Optional[Iterable[DuplicateKind]] = None
    ) -> List[DuplicateGroup]:
        """Run the selected passes (all by default) and concatenate their groups."""
        selected = set(kinds) if kinds is not None else set(DuplicateKind)
        groups: List[DuplicateGroup] = []

        for kind in DuplicateKind:
            if kind not in selected:
                continue
            if kind == DuplicateKind.NAME:
                found = self.find_name_duplicates(scan.files)
            elif kind == DuplicateKind.CONTENT:
                found = self.find_content_duplicates(scan.files)
            elif kind == DuplicateKind.FOLDER:
                found = self.find_folder_duplicates(scan.directories, scan.files)
            else:
                raise ValueError(f"Unknown duplicate kind: {kind!r}")
            logger.info(f"{kind.display_name} pass: {len(found)} groups")
            groups.extend(found)

        return groups

    def find_name_duplicates(self, files: List[FileRecord]) -> List[DuplicateGroup]:
        buckets = self._group_by(files, lambda f: f.name)
        return self._make_groups(
            DuplicateKind.NAME, buckets.values(),
            kept_size=lambda members: max(f.size for f in members))

    def find_content_duplicates(self, files: List[FileRecord]) -> List[DuplicateGroup]:
        candidates = [f for f in files if not f.is_directory and f.size > 0]

        survivors: List[FileRecord] = []
        for size, same_size in self._group_by(candidates, lambda f: f.size).items():
            if size > self.prefilter_threshold:
                for same_front in self._group_by(same_size, self.fingerprinter.front_hash).values():
                    survivors.extend(same_front)
            else:
                survivors.extend(same_size)

        buckets = self._group_by(survivors, self.fingerprinter.fingerprint)
        return self._make_groups(
            DuplicateKind.CONTENT, buckets.values(),
            kept_size=lambda members: members[0].size)

    def find_folder_duplicates(
        self,
        directories: List[FileRecord],
        files: List[FileRecord]
    ) -> List[DuplicateGroup]:
        structures = self.folder_hasher.build(directories, files)
        records = {d.path: d for d in directories}

        # Directories without any descendant file would all hash alike
        non_empty = [s for s in structures.values() if not s.is_empty]
        buckets = self._group_by(non_empty, lambda s: s.composite)

        member_lists = [
            [replace(records[s.path], size=s.total_size) for s in same_structure]
            for same_structure in buckets.values()
        ]
        return self._make_groups(
            DuplicateKind.FOLDER, member_lists,
            kept_size=lambda members: max(f.size for f in members))

    @staticmethod
    def _make_groups(
        kind: DuplicateKind,
        buckets: Iterable[List[FileRecord]],
        kept_size: Callable[[List[FileRecord]], int]
    ) -> List[DuplicateGroup]:
        groups = []
        for bucket in buckets:
            members = sorted(bucket, key=lambda f: f.path)
            total_size = sum(f.size for f in members)
            groups.append(DuplicateGroup(
                kind=kind,
                files=members,
                total_size=total_size,
                reclaimable_bytes=total_size - kept_size(members),
            ))
        groups.sort(key=lambda g: g.files[0].path)
        return groups

    @staticmethod
    def _group_by(items: List[T], key_func: Callable[[T], Any]) -> Dict[Any, List[T]]:
        """
        Helper method to group items by any computed key.
        Args:
            items: Items to group
            key_func: Function that computes a hashable key; None means "not groupable"
        Returns:
            Dict[key, List[item]] holding only keys shared by 2+ items
        """
        groups = defaultdict(list)
        skipped = 0
        for item in items:
            try:
                key = key_func(item)
            except (HashError, OSError) as e:
                logger.warning(f"Skipping from grouping: {e}")
                skipped += 1
                continue
            if key is not None:
                groups[key].append(item)

        if skipped > 0:
            logger.warning(f"Skipped {skipped} entries due to read errors")

        return {key: group for key, group in groups.items() if len(group) >= 2}
