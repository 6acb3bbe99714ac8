"""
=============================================================================
FILE STORAGE
=============================================================================

The file endpoints never touch the filesystem directly. They receive a
storage object with two operations:

    read(name)        → bytes        raises StorageNotFound / StorageIOError
    write(name, data) → None         raises StorageIOError

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 STORAGE ERRORS → HTTP STATUS                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │   StorageNotFound   → 404 Not Found                                 │
    │   StorageIOError    → 500 Internal Server Error                     │
    └─────────────────────────────────────────────────────────────────────┘

Three implementations ship with the package:

- DirectoryStorage: files under a root directory given at startup
- MemoryStorage:    a dict, for tests and embedding
- NoStorage:        nothing configured; reads miss, writes fail

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

By default DirectoryStorage uses the name verbatim, so
``GET /files/../../etc/passwd`` reads outside the root. Pass
``confine=True`` (``--confine`` on the command line) to resolve the path
first and treat anything outside the root as missing:

    full_path = (root / name).resolve()
    full_path.relative_to(root)     # ValueError if outside root

Concurrent reads and writes of one name are not coordinated; a reader may
observe a partially written file.

=============================================================================
"""

import os
import threading
from pathlib import Path
from typing import Dict, Protocol


class StorageError(Exception):
    """Base class for storage failures."""


class StorageNotFound(StorageError):
    """The named file does not exist."""


class StorageIOError(StorageError):
    """Any other failure reading or writing a file."""


class Storage(Protocol):
    def read(self, name: str) -> bytes:
        ...

    def write(self, name: str, data: bytes) -> None:
        ...


class DirectoryStorage:
    """
    Files stored under a root directory.

    Usage:
        storage = DirectoryStorage("/tmp/files")
        storage.write("note.txt", b"hi")
        storage.read("note.txt")   # b"hi"
    """

    def __init__(self, root: str, confine: bool = False):
        """
        Args:
            root: Directory that names are relative to.
            confine: Refuse names that resolve outside ``root``.
        """
        self.root = root
        self.confine = confine

    def _path(self, name: str) -> str:
        if not self.confine:
            # root + name, as given
            return os.path.join(self.root, "") + name

        root = Path(self.root).resolve()
        full_path = (root / name).resolve()
        try:
            full_path.relative_to(root)
        except ValueError:
            raise StorageNotFound(f"{name!r} is outside {self.root}") from None
        return str(full_path)

    def read(self, name: str) -> bytes:
        path = self._path(name)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise StorageNotFound(f"No such file: {path}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to read {path}: {e}") from e

    def write(self, name: str, data: bytes) -> None:
        path = self._path(name)
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageIOError(f"Failed to write {path}: {e}") from e

    def __repr__(self) -> str:
        return f"DirectoryStorage({self.root!r}, confine={self.confine})"


class MemoryStorage:
    """
    In-memory storage keyed by name.

    Args:
        files: Initial contents, copied.
    """

    def __init__(self, files: Dict[str, bytes] = None):
        self._files: Dict[str, bytes] = dict(files or {})
        self._lock = threading.Lock()

    def read(self, name: str) -> bytes:
        with self._lock:
            try:
                return self._files[name]
            except KeyError:
                raise StorageNotFound(f"No such file: {name}") from None

    def write(self, name: str, data: bytes) -> None:
        with self._lock:
            self._files[name] = bytes(data)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._files

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)


class NoStorage:
    """
    Stand-in when no files directory is configured.

    The file routes stay installed, so GET answers 404, POST answers 500
    and other methods still get 405.
    """

    def read(self, name: str) -> bytes:
        raise StorageNotFound(f"No files directory configured: {name}")

    def write(self, name: str, data: bytes) -> None:
        raise StorageIOError(f"No files directory configured, cannot write {name}")

    def __repr__(self) -> str:
        return "NoStorage()"
