"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Low-level filesystem primitives used by the mutation executor and the undo manager.
Provides durable copies (every file flushed and fsync'ed), relocation that never
overwrites, permanent removal and removal to the system trash.
"""
import os
import shutil
from pathlib import Path
from typing import NoReturn

from send2trash import send2trash

COPY_BUFFER_SIZE = 1024 * 1024


class FileService:
    """
    Filesystem operations shared by mutations and their reversal.
    Every method raises OSError (or RuntimeError for the trash) and leaves
    recovery decisions to the caller.
    """

    @staticmethod
    def copy_durable(src: str, dst: str) -> None:
        """
        Copies a file or a whole directory tree to `dst`, which must not exist.
        Each copied file is flushed and fsync'ed before the call returns.
        """
        if os.path.lexists(dst):
            raise FileExistsError(f"Target already exists: {dst}")

        if os.path.isdir(src) and not os.path.islink(src):
            os.makedirs(dst)
            for current, dirs, files in os.walk(src, onerror=FileService._raise):
                rel = os.path.relpath(current, src)
                target_dir = dst if rel == os.curdir else os.path.join(dst, rel)
                for name in dirs:
                    os.makedirs(os.path.join(target_dir, name), exist_ok=True)
                for name in files:
                    FileService._copy_file_durable(
                        os.path.join(current, name), os.path.join(target_dir, name))
        else:
            FileService._copy_file_durable(src, dst)

    @staticmethod
    def _copy_file_durable(src: str, dst: str) -> None:
        with open(src, "rb") as fsrc, open(dst, "xb") as fdst:
            shutil.copyfileobj(fsrc, fdst, COPY_BUFFER_SIZE)
            fdst.flush()
            os.fsync(fdst.fileno())
        shutil.copystat(src, dst)

    @staticmethod
    def restore_missing(src: str, dst: str) -> None:
        """
        Copies back whatever part of `src` is missing at `dst`.
        Entries that still exist at `dst` are left untouched, so a tree that was
        only partly removed ends up complete again.
        """
        if not os.path.lexists(dst):
            FileService.copy_durable(src, dst)
            return
        if not (os.path.isdir(src) and os.path.isdir(dst)):
            return

        for current, dirs, files in os.walk(src, onerror=FileService._raise):
            rel = os.path.relpath(current, src)
            target_dir = dst if rel == os.curdir else os.path.join(dst, rel)
            os.makedirs(target_dir, exist_ok=True)
            for name in files:
                target = os.path.join(target_dir, name)
                if not os.path.lexists(target):
                    FileService._copy_file_durable(os.path.join(current, name), target)

    @staticmethod
    def relocate(src: str, dst: str) -> None:
        """Moves or renames `src` to `dst`. Fails if anything already exists at `dst`."""
        if not os.path.lexists(src):
            raise FileNotFoundError(f"File not found: {src}")
        if os.path.lexists(dst):
            raise FileExistsError(f"Target already exists: {dst}")
        shutil.move(src, dst)

    @staticmethod
    def remove(path: str) -> None:
        """Permanently removes a file or a directory tree."""
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file or directory to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def _raise(error: OSError) -> NoReturn:
        raise error
