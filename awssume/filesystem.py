"""Filesystem access used by the config store.

``OsFilesystem`` works against the real filesystem. ``MemoryFilesystem`` keeps
files in a dict and is used to exercise the store without touching disk.
Both raise the builtin ``OSError`` subclasses (``FileNotFoundError`` etc.)
so callers handle them the same way.
"""

from pathlib import Path
from typing import Dict, Optional, Protocol, Union

PathLike = Union[str, Path]

#: Permissions for newly written configuration files
DEFAULT_FILE_MODE = 0o644


class Filesystem(Protocol):
    def exists(self, path: PathLike) -> bool: ...

    def read_bytes(self, path: PathLike) -> bytes: ...

    def write_bytes(self, path: PathLike, data: bytes) -> None: ...

    def create(self, path: PathLike) -> None: ...

    def remove(self, path: PathLike) -> None: ...


class OsFilesystem:
    """Filesystem backed by the operating system"""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def read_bytes(self, path: PathLike) -> bytes:
        return Path(path).read_bytes()

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        existed = p.exists()
        p.write_bytes(data)
        # Mode only applies to new files; existing permissions are kept
        if not existed:
            p.chmod(DEFAULT_FILE_MODE)

    def create(self, path: PathLike) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.touch(mode=DEFAULT_FILE_MODE)

    def remove(self, path: PathLike) -> None:
        Path(path).unlink()


class MemoryFilesystem:
    """In-memory filesystem keyed by path string"""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = {str(k): v for k, v in (files or {}).items()}

    def exists(self, path: PathLike) -> bool:
        return str(path) in self.files

    def read_bytes(self, path: PathLike) -> bytes:
        try:
            return self.files[str(path)]
        except KeyError:
            raise FileNotFoundError(2, "No such file or directory", str(path)) from None

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        self.files[str(path)] = bytes(data)

    def create(self, path: PathLike) -> None:
        self.files[str(path)] = b""

    def remove(self, path: PathLike) -> None:
        if str(path) not in self.files:
            raise FileNotFoundError(2, "No such file or directory", str(path))
        del self.files[str(path)]
