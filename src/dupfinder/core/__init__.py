"""
Core duplicate detection engine — walker, ignore rules, fingerprinter, folder hasher and grouper.

This package contains the detection foundation of dupfinder:
- DirectoryWalkerImpl: recursive traversal with layered ignore rules, depth and hidden-entry policy
- IgnoreRuleResolver: .gitignore-style rules composed across every ancestor directory
- FingerprinterImpl + Sha256AlgorithmImpl: streaming SHA-256 content fingerprints (xxHash64 pre-filter)
- FolderStructureHasher: order-independent composite fingerprints for directories
- DuplicateGrouperImpl: name, content and folder grouping passes
- Models: FileRecord, DuplicateGroup, Disposition, UndoEntry and configuration objects

Everything here is read-only over the filesystem; mutations live in dupfinder.services.
"""

from .walker import DirectoryWalkerImpl
from .ignore_rules import IgnoreRule, IgnoreRuleSet, IgnoreRuleResolver
from .hasher import FingerprinterImpl, Sha256AlgorithmImpl, XXHashAlgorithmImpl
from .folder_hasher import FolderStructureHasher
from .grouper import DuplicateGrouperImpl
from .config import AppConfig, load_config
from .exceptions import (
    DupFinderError, HashError, BackupError, UndoNotFoundError, UndoConflictError,
    UndoLogError, ConfigError, IgnoreRuleError)
from .models import (
    FileRecord, DuplicateGroup, DuplicateKind, Disposition, DispositionKind,
    DispositionOutcome, FolderStructure, UndoEntry, ScanOptions, ScanResult,
    DuplicateStats, SortOrder)

__all__ = [
    "DirectoryWalkerImpl",
    "IgnoreRule",
    "IgnoreRuleSet",
    "IgnoreRuleResolver",
    "FingerprinterImpl",
    "Sha256AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "FolderStructureHasher",
    "DuplicateGrouperImpl",
    "AppConfig",
    "load_config",
    "DupFinderError",
    "HashError",
    "BackupError",
    "UndoNotFoundError",
    "UndoConflictError",
    "UndoLogError",
    "ConfigError",
    "IgnoreRuleError",
    "FileRecord",
    "DuplicateGroup",
    "DuplicateKind",
    "Disposition",
    "DispositionKind",
    "DispositionOutcome",
    "FolderStructure",
    "UndoEntry",
    "ScanOptions",
    "ScanResult",
    "DuplicateStats",
    "SortOrder",
]
