"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate finder.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while maintaining flexibility and modularity.

Key Components:
---------------
- HashAlgorithm: Standardized streaming interface for hash functions (SHA-256, xxHash).
- Fingerprinter: Interface for computing content fingerprints of files.
- DirectoryWalker: Interface for traversing a root and returning file/directory records.
- DuplicateGrouper: Interface for the three grouping passes.
"""

from typing import Protocol, List, Optional, Iterable, Any
from dupfinder.core.models import (
    FileRecord,
    DuplicateGroup,
    DuplicateKind,
    ScanResult,
)


# ===== Interfaces =====

class HashState(Protocol):
    """Incremental hash object (what hashlib and xxhash constructors return)."""
    def update(self, data: bytes) -> Any: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like SHA-256 or xxHash
    without affecting the rest of the detection logic.
    """
    name: str

    def new(self) -> HashState:
        """Return a fresh incremental hash state."""
        ...


class Fingerprinter(Protocol):
    """Interface for hashing file content."""
    def fingerprint(self, record: FileRecord) -> Optional[str]: ...
    def front_hash(self, record: FileRecord) -> str: ...
    def digest_text(self, text: str) -> str: ...


class DirectoryWalker(Protocol):
    """
    Interface for traversing a file system root.

    Methods:
        walk: Returns every file and directory under the root that passes the filters.
    """
    def walk(self) -> ScanResult:
        ...


class DuplicateGrouper(Protocol):
    """
    Interface for grouping records into duplicate groups.
    Each pass is independent and read-only over its input.
    """
    def find_duplicates(
        self,
        scan: ScanResult,
        kinds: Optional[Iterable[DuplicateKind]] = None
    ) -> List[DuplicateGroup]:
        ...

    def find_name_duplicates(self, files: List[FileRecord]) -> List[DuplicateGroup]:
        """Group files by exact base name."""
        ...

    def find_content_duplicates(self, files: List[FileRecord]) -> List[DuplicateGroup]:
        """Group non-empty files by content fingerprint."""
        ...

    def find_folder_duplicates(
        self,
        directories: List[FileRecord],
        files: List[FileRecord]
    ) -> List[DuplicateGroup]:
        """Group directories by composite structure fingerprint."""
        ...
