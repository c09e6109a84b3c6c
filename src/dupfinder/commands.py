"""
Unified command orchestrator for duplicate detection.
This is the SINGLE entry point for the scan workflow — used by the CLI and by library callers.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from dupfinder.core.grouper import DuplicateGrouperImpl
from dupfinder.core.hasher import FingerprinterImpl
from dupfinder.core.models import DuplicateGroup, DuplicateKind, ScanOptions, ScanResult
from dupfinder.core.walker import DirectoryWalkerImpl

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Orchestrates the detection workflow:
    1. Walk the root with ScanOptions (ignore rules, depth, hidden entries)
    2. Run the selected grouping passes over the walk result

    Usage:
        options = ScanOptions(root_dir="~/Downloads", max_depth=5)
        command = ScanCommand()
        scan, groups = command.execute(options, kinds=[DuplicateKind.CONTENT])
    """

    def __init__(self, fingerprinter: Optional[FingerprinterImpl] = None):
        self._fingerprinter = fingerprinter or FingerprinterImpl()
        self._grouper = DuplicateGrouperImpl(self._fingerprinter)
        self._scan: Optional[ScanResult] = None

    def execute(
            self,
            options: ScanOptions,
            kinds: Optional[Iterable[DuplicateKind]] = None
    ) -> Tuple[ScanResult, List[DuplicateGroup]]:
        """
        Execute a scan with given options.

        Args:
            options: Validated scan options
            kinds: Grouping passes to run (all when None)

        Returns:
            Tuple of (scan_result, duplicate_groups)

        Raises:
            RuntimeError: If the root directory is missing or not a directory
        """
        walker = DirectoryWalkerImpl(options)
        self._scan = walker.walk()

        if not self._scan.files:
            logger.info("No files found, nothing to group")
            return self._scan, []

        groups = self._grouper.find_duplicates(self._scan, kinds)
        logger.info(f"Found {len(groups)} duplicate groups")
        return self._scan, groups

    def get_scan(self) -> Optional[ScanResult]:
        """Get the last walk result after execution."""
        return self._scan
