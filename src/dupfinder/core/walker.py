"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Implements directory traversal for duplicate detection.
Features:
- Recursively walks the root with os.walk, pruning subdirectories in place
- Applies layered ignore rules, hidden-entry and depth policy
- Follows directory symlinks only on request, with loop protection;
  a real directory is always preferred over a symlink pointing at it
- Returns files and directories as two disjoint, name-ordered sequences
"""

import os
import time
import logging
from typing import List, Optional, Set

from dupfinder.core.ignore_rules import IgnoreRuleResolver
from dupfinder.core.interfaces import DirectoryWalker
from dupfinder.core.models import FileRecord, ScanOptions, ScanResult

logger = logging.getLogger(__name__)


class DirectoryWalkerImpl(DirectoryWalker):
    """
    Walks a directory tree and collects FileRecords for files and directories.

    Depth is counted from the root: entries directly inside the root are at depth 0,
    and an entry is emitted only while its depth is below `max_depth`.

    Attributes:
        options: Validated scan options
        resolver: Ignore rule resolver bound to the same root
    """

    def __init__(self, options: ScanOptions, resolver: Optional[IgnoreRuleResolver] = None):
        self.options = options
        self.root_dir = os.path.abspath(options.root_dir)
        self.resolver = resolver or IgnoreRuleResolver(
            self.root_dir,
            patterns=options.ignore_patterns,
            ignore_file_names=options.ignore_file_names,
        )

    def walk(self) -> ScanResult:
        """
        Single-pass traversal. Unreadable directories are logged and skipped;
        only a missing or non-directory root is fatal.
        """
        logger.debug(f"Root directory: {self.root_dir}")
        logger.debug(
            f"Options: include_hidden={self.options.include_hidden}, "
            f"follow_symlinks={self.options.follow_symlinks}, max_depth={self.options.max_depth}")

        # Validate root directory exists and is accessible
        if not os.path.exists(self.root_dir):
            error_msg = f"Directory does not exist: {self.root_dir}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)
        if not os.path.isdir(self.root_dir):
            error_msg = f"Not a directory: {self.root_dir}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        start_time = time.time()
        result = ScanResult(root_dir=self.root_dir)
        visited: Set[str] = {os.path.realpath(self.root_dir)}
        max_depth = self.options.max_depth

        for current, dirs, files in os.walk(
                self.root_dir,
                topdown=True,
                onerror=self._on_walk_error,
                followlinks=self.options.follow_symlinks):
            rel_dir = self._relative(current)
            depth = rel_dir.count("/") + 1 if rel_dir else 0

            if max_depth is not None and depth >= max_depth:
                dirs[:] = []
                continue

            dirs.sort()
            files.sort()
            rules = self.resolver.rules_for(rel_dir)
            can_descend = max_depth is None or depth + 1 < max_depth

            # Pre-filter subdirectories BEFORE os.walk enters them
            if self.options.follow_symlinks:
                # Real directories claim their path before any sibling symlink to them
                visited.add(os.path.realpath(current))
                visited.update(
                    os.path.realpath(os.path.join(current, name)) for name in dirs
                    if (self.options.include_hidden or not name.startswith("."))
                    and not os.path.islink(os.path.join(current, name)))
            kept: List[str] = []
            for name in dirs:
                full_path = os.path.join(current, name)
                rel_path = f"{rel_dir}/{name}" if rel_dir else name

                if not self._is_visible(name, full_path):
                    continue

                if os.path.islink(full_path):
                    if not self.options.follow_symlinks:
                        logger.debug(f"Skipping directory symlink: {full_path}")
                        continue
                    real = os.path.realpath(full_path)
                    if real in visited:
                        logger.warning(f"Skipping already visited directory (symlink loop?): {full_path}")
                        continue
                    visited.add(real)

                ignored = rules.is_ignored(rel_path, is_dir=True)
                if ignored and not rules.has_negations:
                    logger.debug(f"Ignoring directory: {rel_path}")
                    continue

                if not ignored:
                    record = self._make_record(full_path, is_dir=True)
                    if record is None:
                        continue
                    result.directories.append(record)

                if can_descend:
                    kept.append(name)
            dirs[:] = kept

            for name in files:
                full_path = os.path.join(current, name)
                rel_path = f"{rel_dir}/{name}" if rel_dir else name

                if not self._is_visible(name, full_path):
                    continue

                if os.path.islink(full_path):
                    if not os.path.exists(full_path):
                        logger.warning(f"Skipping broken symlink: {full_path}")
                    else:
                        logger.debug(f"Skipping symbolic link: {full_path}")
                    continue

                if rules.is_ignored(rel_path, is_dir=False):
                    logger.debug(f"Ignoring file: {rel_path}")
                    continue

                record = self._make_record(full_path, is_dir=False)
                if record is None:
                    continue
                result.files.append(record)
                result.total_size += record.size

        result.elapsed = time.time() - start_time
        logger.debug(f"Total walk time: {result.elapsed:.2f} seconds")
        logger.info(
            f"Walk completed: {len(result.files)} files, "
            f"{len(result.directories)} directories, {result.total_size} bytes")
        return result

    def _relative(self, path: str) -> str:
        """Path relative to the root, '/'-separated, '' for the root itself."""
        rel = os.path.relpath(path, self.root_dir)
        if rel == os.curdir:
            return ""
        return rel.replace(os.sep, "/")

    def _is_visible(self, name: str, full_path: str) -> bool:
        if not self.options.include_hidden and name.startswith("."):
            logger.debug(f"Skipping hidden entry: {full_path}")
            return False
        return True

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror or error}")

    @staticmethod
    def _make_record(path: str, is_dir: bool) -> Optional[FileRecord]:
        """
        Stat a path and build its record.
        Returns:
            Optional[FileRecord]: None if the entry cannot be stat'ed
        """
        try:
            stat_result = os.stat(path)
        except OSError as e:
            logger.warning(f"Could not stat {path}: {e}")
            return None

        created = getattr(stat_result, "st_birthtime", stat_result.st_ctime)
        return FileRecord(
            path=path,
            size=0 if is_dir else stat_result.st_size,
            modified=stat_result.st_mtime,
            created=created,
            is_directory=is_dir,
        )
