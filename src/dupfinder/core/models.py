"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for scanning, duplicate grouping and reversible file mutations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Optional, Any
from enum import Enum
import os
import uuid


# =============================
# Enums
# =============================

class DuplicateKind(str, Enum):
    """The three independent grouping strategies."""
    NAME = "name-based"
    CONTENT = "content-based"
    FOLDER = "folder-based"

    @property
    def display_name(self) -> str:
        """Human-readable name for console and report output."""
        mapping = {
            DuplicateKind.NAME: "Name",
            DuplicateKind.CONTENT: "Content",
            DuplicateKind.FOLDER: "Folder",
        }
        return mapping[self]

    @property
    def description(self) -> str:
        mapping = {
            DuplicateKind.NAME: "Files sharing the exact same name in different locations",
            DuplicateKind.CONTENT: "Files with byte-identical content",
            DuplicateKind.FOLDER: "Directories with identical structure and content",
        }
        return mapping[self]

    def __repr__(self) -> str:
        return self.value


class DispositionKind(str, Enum):
    """What to do with one member of a duplicate group."""
    KEEP = "keep"
    DELETE = "delete"
    MOVE = "move"
    RENAME = "rename"

    def __repr__(self) -> str:
        return self.value


class SortOrder(Enum):
    SHORTEST_PATH = "shortest-path"
    SHORTEST_FILENAME = "shortest-filename"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            SortOrder.SHORTEST_PATH: "Shortest Path",
            SortOrder.SHORTEST_FILENAME: "Shortest Filename",
        }
        return mapping.get(self, self.value)


# ======================
#  Core Data Models
# ======================

@dataclass
class FileRecord:
    """
    A single file or directory found during traversal.
    The fingerprint is filled in lazily by the fingerprinter, only for non-empty
    regular files, and never changes once set.
    """
    path: str
    size: int  # in bytes
    name: Optional[str] = None
    modified: float = 0.0
    created: float = 0.0
    is_directory: bool = False
    fingerprint: Optional[str] = None
    extension: Optional[str] = None

    def __post_init__(self):
        """Automatically extract basename and extension from path if not provided."""
        if self.name is None:
            self.name = os.path.basename(self.path)

        if self.extension is None:
            _, ext = os.path.splitext(self.name)
            self.extension = "" if self.is_directory else ext.lower()

    @property
    def path_depth(self) -> int:
        return self.path.rstrip(os.sep).count(os.sep)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "size": self.size,
            "modified": self.modified,
            "created": self.created,
            "is_directory": self.is_directory,
            "fingerprint": self.fingerprint,
            "extension": self.extension,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileRecord':
        return cls(
            path=data["path"],
            size=int(data["size"]),
            name=data.get("name"),
            modified=float(data.get("modified", 0.0)),
            created=float(data.get("created", 0.0)),
            is_directory=bool(data.get("is_directory", False)),
            fingerprint=data.get("fingerprint"),
            extension=data.get("extension"),
        )

    def __repr__(self):
        kind = "dir" if self.is_directory else "file"
        return f"<FileRecord {kind} path={self.path}, size={self.size}>"


@dataclass(frozen=True)
class Disposition:
    """
    Action assigned to one group member.
    MOVE carries the destination directory, RENAME carries the new base name;
    KEEP and DELETE carry nothing.
    """
    kind: DispositionKind
    target: Optional[str] = None

    def __post_init__(self):
        needs_target = self.kind in (DispositionKind.MOVE, DispositionKind.RENAME)
        if needs_target and not self.target:
            raise ValueError(f"{self.kind.value} requires a target")
        if not needs_target and self.target is not None:
            raise ValueError(f"{self.kind.value} does not take a target")
        if self.kind == DispositionKind.RENAME and (
                os.sep in self.target or (os.altsep and os.altsep in self.target)):
            raise ValueError(f"Rename target must be a bare file name: {self.target!r}")

    @classmethod
    def keep(cls) -> 'Disposition':
        return cls(DispositionKind.KEEP)

    @classmethod
    def delete(cls) -> 'Disposition':
        return cls(DispositionKind.DELETE)

    @classmethod
    def move(cls, destination_dir: str) -> 'Disposition':
        return cls(DispositionKind.MOVE, destination_dir)

    @classmethod
    def rename(cls, new_name: str) -> 'Disposition':
        return cls(DispositionKind.RENAME, new_name)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "target": self.target}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Disposition':
        return cls(DispositionKind(data["kind"]), data.get("target"))


@dataclass
class DuplicateGroup:
    """
    Two or more records considered duplicates by one grouping strategy.
    Only the disposition mapping changes after creation.
    """
    kind: DuplicateKind
    files: List[FileRecord]
    total_size: int
    reclaimable_bytes: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    dispositions: Dict[str, Disposition] = field(default_factory=dict)

    def __post_init__(self):
        if len(self.files) < 2:
            raise ValueError(
                f"A duplicate group needs at least 2 members, got {len(self.files)}")

    @property
    def duplicate_count(self) -> int:
        """How many records are in this group."""
        return len(self.files)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def assign(self, path: str, disposition: Disposition) -> None:
        """Assign a disposition to one member, replacing any previous choice."""
        if path not in self.paths:
            raise KeyError(f"{path} is not a member of group {self.id}")
        self.dispositions[path] = disposition

    def disposition_for(self, path: str) -> Optional[Disposition]:
        return self.dispositions.get(path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "files": [f.to_dict() for f in self.files],
            "total_size": self.total_size,
            "reclaimable_bytes": self.reclaimable_bytes,
            "dispositions": {p: d.to_dict() for p, d in self.dispositions.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DuplicateGroup':
        return cls(
            id=data["id"],
            kind=DuplicateKind(data["kind"]),
            files=[FileRecord.from_dict(f) for f in data["files"]],
            total_size=int(data["total_size"]),
            reclaimable_bytes=int(data["reclaimable_bytes"]),
            dispositions={
                p: Disposition.from_dict(d)
                for p, d in data.get("dispositions", {}).items()
            },
        )

    def __repr__(self):
        return f"<DuplicateGroup kind={self.kind.value}, count={len(self.files)}>"


@dataclass(frozen=True)
class FolderStructure:
    """
    Composite description of one directory, built bottom-up.

    Attributes:
        files: descendant file path relative to this directory ('/'-separated) -> fingerprint
        subdirectories: immediate child directory name -> child composite fingerprint
        composite: order-independent digest of the two mappings above
        total_size: sum of the sizes of all descendant files
    """
    path: str
    name: str
    files: Dict[str, str]
    subdirectories: Dict[str, str]
    composite: str
    total_size: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.files


@dataclass(frozen=True)
class UndoEntry:
    """Durable record of one delete/move/rename, enough to reverse it."""
    action: DispositionKind
    original_path: str
    backup_path: Optional[str] = None
    destination_path: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.action == DispositionKind.KEEP:
            raise ValueError("KEEP is not a reversible mutation")
        if self.action == DispositionKind.DELETE and not self.backup_path:
            raise ValueError("A delete entry needs a backup path")
        if self.action in (DispositionKind.MOVE, DispositionKind.RENAME) and not self.destination_path:
            raise ValueError(f"A {self.action.value} entry needs a destination path")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "original_path": self.original_path,
            "backup_path": self.backup_path,
            "destination_path": self.destination_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UndoEntry':
        return cls(
            id=data["id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            action=DispositionKind(data["action"]),
            original_path=data["original_path"],
            backup_path=data.get("backup_path"),
            destination_path=data.get("destination_path"),
        )


@dataclass
class DispositionOutcome:
    """Result of applying one disposition."""
    path: str
    disposition: Disposition
    success: bool
    undo_entry_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ScanResult:
    """Everything the walker produced for one root."""
    root_dir: str
    files: List[FileRecord] = field(default_factory=list)
    directories: List[FileRecord] = field(default_factory=list)
    total_size: int = 0
    elapsed: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.files)

    def __repr__(self):
        return (f"<ScanResult files={len(self.files)}, "
                f"directories={len(self.directories)}, size={self.total_size}>")


@dataclass
class DuplicateStats:
    """Aggregate numbers over a list of duplicate groups."""
    total_groups: int = 0
    total_files: int = 0
    total_size: int = 0
    reclaimable_bytes: int = 0
    groups_by_kind: Dict[DuplicateKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in DuplicateKind})


"""
DTO for scan parameters with built-in validation.
Interface-agnostic — used by the CLI and by library callers.
"""
DEFAULT_IGNORE_FILE_NAMES = (".gitignore", ".dupignore")


@dataclass
class ScanOptions:
    """Parameters for one traversal, validated on creation."""
    root_dir: str
    include_hidden: bool = False
    follow_symlinks: bool = False
    ignore_patterns: List[str] = field(default_factory=list)
    ignore_file_names: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FILE_NAMES))
    max_depth: Optional[int] = None

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError("Maximum depth cannot be negative")

        self.ignore_patterns = [p for p in (s.rstrip("\r\n") for s in self.ignore_patterns) if p.strip()]
