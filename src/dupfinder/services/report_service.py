"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_service.py
Renders duplicate groups as a Markdown report: executive summary, breakdown by
kind, a cleanup plan and one table per group.
"""
import logging
import os
from datetime import date
from typing import List, Optional

from dupfinder.core.exceptions import DupFinderError
from dupfinder.core.models import DuplicateGroup, DuplicateKind
from dupfinder.services.duplicate_service import DuplicateService
from dupfinder.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)


class MarkdownReporter:
    def __init__(self, now: Optional[float] = None):
        # Fixed "now" keeps relative ages reproducible
        self.now = now

    def render(self, groups: List[DuplicateGroup], base_directory: str) -> str:
        stats = DuplicateService.calculate_stats(groups)
        human = ConvertUtils.bytes_to_human
        content_savings = DuplicateService.savings_by_kind(groups, DuplicateKind.CONTENT)

        lines = [
            "# Duplicate Files Report",
            "",
            f"Generated on: {date.today().isoformat()}",
            f"Directory: `{base_directory}`",
            "",
            "## Executive Summary",
            "",
            "🔍 **Scan Results:**",
            f"- Duplicate groups found: **{stats.total_groups}**",
            f"- Total files in duplicates: **{stats.total_files}**",
            f"- Total size of duplicates: **{human(stats.total_size)}**",
            f"- **Potential space savings: {human(stats.reclaimable_bytes)}**",
            "",
            "📊 **Breakdown by Type:**",
        ]
        for kind in DuplicateKind:
            lines.append(f"- {kind.display_name}-based duplicates: {stats.groups_by_kind[kind]} groups")

        lines += [
            "",
            "## Cleanup Action Plan",
            "",
            "1. **Review content-based duplicates first** 📋",
            "   - Byte-identical files, safest to remove",
            f"   - Estimated savings: {human(content_savings)}",
            "",
            "2. **Review name-based duplicates** 📝",
            "   - Same name in different locations; compare contents before deleting",
            "",
            "3. **Clean up folder duplicates** 📁",
            "   - Whole directories with identical structure and content",
            "",
            "⚠️ Deletions made by dupfinder are backed up and can be reverted with `dupfinder undo`.",
            "",
            "## Detailed Findings",
            "",
        ]

        for idx, group in enumerate(groups, 1):
            lines += self._render_group(idx, group, base_directory)

        lines += ["---", "*Report generated by dupfinder*", ""]
        return "\n".join(lines)

    def write(self, groups: List[DuplicateGroup], output_path: str, base_directory: str) -> None:
        report = self.render(groups, base_directory)
        try:
            parent = os.path.dirname(os.path.abspath(output_path))
            os.makedirs(parent, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(report)
        except OSError as e:
            raise DupFinderError(f"Cannot write report {output_path}: {e}") from e
        logger.info(f"Markdown report written: {output_path} ({len(groups)} groups)")

    def _render_group(self, idx: int, group: DuplicateGroup, base_directory: str) -> List[str]:
        human = ConvertUtils.bytes_to_human
        lines = [
            f"### Group {idx}: {self._group_title(group)}",
            "",
            f"**Type:** {group.kind.value}",
            f"**Match:** {group.kind.description}",
            f"**Files:** {len(group.files)}",
            f"**Total Size:** {human(group.total_size)}",
            f"**Potential Savings:** {human(group.reclaimable_bytes)}",
            "",
            "| File Path | Size | Modified | Action |",
            "|-----------|------|----------|--------|",
        ]
        for record in group.files:
            disposition = group.disposition_for(record.path)
            action = disposition.kind.value if disposition else "Pending"
            modified = ConvertUtils.timestamp_to_relative(record.modified, self.now)
            lines.append(
                f"| `{self._display_path(record.path, base_directory)}` "
                f"| {human(record.size)} | {modified} | {action} |")
        lines.append("")
        return lines

    @staticmethod
    def _group_title(group: DuplicateGroup) -> str:
        count = len(group.files)
        if group.kind == DuplicateKind.NAME:
            return f'"{group.files[0].name}" ({count} locations)'
        if group.kind == DuplicateKind.CONTENT:
            return f"Content Match ({count} files)"
        if group.kind == DuplicateKind.FOLDER:
            return f"Folder Match ({count} folders)"
        raise ValueError(f"Unknown duplicate kind: {group.kind!r}")

    @staticmethod
    def _display_path(path: str, base_directory: str) -> str:
        """Path relative to the scanned root ('./a/b'), absolute when outside it."""
        base = os.path.abspath(base_directory)
        full = os.path.abspath(path)
        if full == base or full.startswith(base.rstrip(os.sep) + os.sep):
            rel = os.path.relpath(full, base).replace(os.sep, "/")
            return "." if rel == os.curdir else f"./{rel}"
        return path
