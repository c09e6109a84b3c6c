"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements content fingerprinting using FileRecord objects and pluggable hash algorithms.

FingerprinterImpl streams files through a cryptographic digest (SHA-256 by default)
in fixed-size chunks, caching results per path so that the content pass and the
folder pass never read the same file twice. A cheap xxHash64 over the first chunk
is available as a pre-filter for the content pass.
"""

import hashlib
import logging
from typing import Dict, Optional

import xxhash

from dupfinder.core.exceptions import HashError
from dupfinder.core.interfaces import Fingerprinter, HashAlgorithm, HashState
from dupfinder.core.models import FileRecord

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024  # bytes per read() while streaming a full fingerprint
FRONT_CHUNK_SIZE = 64 * 1024   # bytes covered by the pre-filter hash


# Use the same way to implement and use any other hashing algorithm
class Sha256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    @staticmethod
    def new() -> HashState:
        return hashlib.sha256()


class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxh64"

    @staticmethod
    def new() -> HashState:
        return xxhash.xxh64()


class FingerprinterImpl(Fingerprinter):
    """
    A fingerprinter that supports any algorithm via the HashAlgorithm interface.
    Computes and caches full-content digests and front-chunk pre-filter hashes.
    """

    def __init__(
        self,
        algorithm: Optional[HashAlgorithm] = None,
        prefilter_algorithm: Optional[HashAlgorithm] = None,
        read_chunk_size: int = READ_CHUNK_SIZE,
        front_chunk_size: int = FRONT_CHUNK_SIZE
    ):
        self.algorithm = algorithm or Sha256AlgorithmImpl()
        self.prefilter_algorithm = prefilter_algorithm or XXHashAlgorithmImpl()
        self.read_chunk_size = read_chunk_size
        self.front_chunk_size = front_chunk_size
        self._full_cache: Dict[str, str] = {}
        self._front_cache: Dict[str, str] = {}

    def fingerprint(self, record: FileRecord) -> Optional[str]:
        """
        Return the content digest of a regular file, storing it on the record.

        Zero-byte files and directories are never fingerprinted (returns None).

        Raises:
            HashError: if the file cannot be read.
        """
        if record.fingerprint is not None:
            return record.fingerprint
        if record.is_directory or record.size == 0:
            return None

        digest = self._full_cache.get(record.path)
        if digest is None:
            digest = self._stream(record.path)
            self._full_cache[record.path] = digest
        record.fingerprint = digest
        return digest

    def front_hash(self, record: FileRecord) -> str:
        """Computes and caches the pre-filter hash of the first chunk of a file."""
        cached = self._front_cache.get(record.path)
        if cached is not None:
            return cached

        state = self.prefilter_algorithm.new()
        try:
            with open(record.path, "rb") as f:
                state.update(f.read(self.front_chunk_size))
        except OSError as e:
            raise HashError(record.path, e) from e

        result = state.hexdigest()
        self._front_cache[record.path] = result
        return result

    def digest_text(self, text: str) -> str:
        """Digest of a text blob with the main algorithm (used for composite fingerprints)."""
        state = self.algorithm.new()
        state.update(text.encode("utf-8", "surrogateescape"))
        return state.hexdigest()

    def clear_cache(self) -> None:
        self._full_cache.clear()
        self._front_cache.clear()

    def _stream(self, path: str) -> str:
        """Feed the whole file through the algorithm without loading it into memory."""
        state = self.algorithm.new()
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(self.read_chunk_size), b""):
                    state.update(chunk)
        except OSError as e:
            raise HashError(path, e) from e
        logger.debug(f"Fingerprinted {path}")
        return state.hexdigest()
