"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/snapshot_service.py
Persists scan results as a JSON snapshot and loads them back for reporting.

Format:
    {
      "baseDirectory": "/abs/root",
      "generatedAt": "2025-01-31T12:30:05",
      "duplicateGroups": [ <DuplicateGroup.to_dict()>, ... ]
    }
"""
import json
import logging
import os
from datetime import datetime
from typing import List, Tuple

from dupfinder.core.exceptions import SnapshotError
from dupfinder.core.models import DuplicateGroup

logger = logging.getLogger(__name__)


class SnapshotService:
    @staticmethod
    def save(groups: List[DuplicateGroup], base_directory: str, output_path: str) -> None:
        payload = {
            "baseDirectory": base_directory,
            "generatedAt": datetime.now().isoformat(timespec="seconds"),
            "duplicateGroups": [group.to_dict() for group in groups],
        }
        try:
            parent = os.path.dirname(os.path.abspath(output_path))
            os.makedirs(parent, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise SnapshotError(f"Cannot write snapshot {output_path}: {e}") from e
        logger.info(f"Snapshot saved: {output_path} ({len(groups)} groups)")

    @staticmethod
    def load(input_path: str) -> Tuple[List[DuplicateGroup], str]:
        """
        Returns:
            Tuple of (duplicate_groups, base_directory)
        Raises:
            SnapshotError: missing, unreadable or malformed file
        """
        try:
            with open(input_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise SnapshotError(f"Cannot read snapshot {input_path}: {e}") from e
        except ValueError as e:
            raise SnapshotError(f"Snapshot {input_path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {input_path} must contain a JSON object")

        try:
            groups = [DuplicateGroup.from_dict(item) for item in data.get("duplicateGroups", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Snapshot {input_path} has a malformed group: {e}") from e

        base_directory = data.get("baseDirectory") or "."
        logger.debug(f"Snapshot loaded: {input_path} ({len(groups)} groups)")
        return groups, base_directory
