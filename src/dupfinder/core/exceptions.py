"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/exceptions.py
Error taxonomy shared by the scanning engine and the mutation/undo services.

Plain OSError is still used for read/stat/permission failures during traversal:
those are logged and the offending path is skipped.
"""


class DupFinderError(Exception):
    """Base class for every error raised by dupfinder."""


class HashError(DupFinderError):
    """A file could not be read while computing its fingerprint."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to hash {path}: {cause}")
        self.path = path
        self.cause = cause


class BackupError(DupFinderError):
    """The backup copy guarding a delete could not be created."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to back up {path}: {cause}")
        self.path = path
        self.cause = cause


class UndoNotFoundError(DupFinderError):
    """Unknown undo entry, or the backup/destination it points at is gone."""


class UndoConflictError(DupFinderError):
    """Something already occupies the path an undo would restore to."""


class UndoLogError(DupFinderError):
    """The undo log could not be read or written."""


class ConfigError(DupFinderError):
    """Malformed configuration."""


class IgnoreRuleError(ConfigError):
    """A single ignore rule could not be parsed."""

    def __init__(self, pattern: str, reason: str, source: str = "<patterns>"):
        super().__init__(f"Invalid ignore rule {pattern!r} in {source}: {reason}")
        self.pattern = pattern
        self.reason = reason
        self.source = source


class SnapshotError(DupFinderError):
    """A scan snapshot could not be read or written."""
