"""Filesystem access used by the manifest builder."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class Filesystem(Protocol):
    """Minimal filesystem interface: existence, size and text reads."""

    def exists(self, path: str) -> bool: ...

    def size(self, path: str) -> int: ...

    def read_text(self, path: str) -> str: ...


class LocalFilesystem:
    """Filesystem backed by the local disk.

    Relative paths resolve against ``root`` (default: current directory).
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root

    def _resolve(self, path: str) -> Path:
        p = Path(path)
        if self._root is not None and not p.is_absolute():
            return self._root / p
        return p

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def size(self, path: str) -> int:
        return self._resolve(path).stat().st_size

    def read_text(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(root={self._root!r})"
