"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Statistics over duplicate groups and the keep-one disposition planner.
"""
from typing import List, Tuple

from dupfinder.core.models import (
    Disposition, DuplicateGroup, DuplicateKind, DuplicateStats, FileRecord, SortOrder)


class DuplicateService:
    @staticmethod
    def calculate_stats(groups: List[DuplicateGroup]) -> DuplicateStats:
        """Aggregate counts, sizes and reclaimable bytes over all groups."""
        stats = DuplicateStats()
        for group in groups:
            stats.total_groups += 1
            stats.total_files += len(group.files)
            stats.total_size += group.total_size
            stats.reclaimable_bytes += group.reclaimable_bytes
            stats.groups_by_kind[group.kind] += 1
        return stats

    @staticmethod
    def savings_by_kind(groups: List[DuplicateGroup], kind: DuplicateKind) -> int:
        return sum(g.reclaimable_bytes for g in groups if g.kind == kind)

    @staticmethod
    def preferred_order(files: List[FileRecord], sort_order: SortOrder) -> List[FileRecord]:
        """
        Orders group members by preference for keeping.

        shortest-path: fewest path components first, then path
        shortest-filename: shortest base name first, then path
        """
        if sort_order == SortOrder.SHORTEST_PATH:
            return sorted(files, key=lambda f: (f.path_depth, f.path))
        if sort_order == SortOrder.SHORTEST_FILENAME:
            return sorted(files, key=lambda f: (len(f.name), f.path))
        raise ValueError(f"Unknown sort order: {sort_order!r}")

    @staticmethod
    def plan_keep_one(group: DuplicateGroup, sort_order: SortOrder = SortOrder.SHORTEST_PATH) -> FileRecord:
        """
        Assigns KEEP to the preferred member and DELETE to every other member.
        Returns:
            FileRecord: the member that is kept
        """
        ordered = DuplicateService.preferred_order(group.files, sort_order)
        keeper = ordered[0]
        group.assign(keeper.path, Disposition.keep())
        for record in ordered[1:]:
            group.assign(record.path, Disposition.delete())
        return keeper

    @staticmethod
    def keep_only_one_file_per_group(
        groups: List[DuplicateGroup],
        sort_order: SortOrder = SortOrder.SHORTEST_PATH
    ) -> Tuple[List[str], int]:
        """
        Plans keep-one for every group.
        Returns:
            - List of paths marked for deletion
            - Bytes that deleting them would free
        """
        files_to_delete = []
        space_saved = 0
        for group in groups:
            keeper = DuplicateService.plan_keep_one(group, sort_order)
            for record in group.files:
                if record.path != keeper.path:
                    files_to_delete.append(record.path)
                    space_saved += record.size
        return files_to_delete, space_saved
