from __future__ import annotations

import io
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd


class StorageAdapter(ABC):
    """
    Abstraction over where the chart pipeline reads its source table from
    and writes rendered images to.

    Implementations map logical keys such as "charts/health_vs_life.png"
    to physical locations.
    """

    @abstractmethod
    def write_raw(self, key: str, content: bytes) -> str:
        """
        Persist arbitrary bytes at the given key.

        Returns the fully-qualified location string (for tracing), e.g.
        "output/charts/health_vs_life.png".
        """

    @abstractmethod
    def read_raw(self, key: str) -> bytes:
        """Read raw bytes previously stored at the given key."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether something is stored at the given key."""

    def read_csv(self, key: str, **kwargs) -> pd.DataFrame:
        """
        Load a UTF-8 CSV stored at `key` into a DataFrame.

        Extra keyword arguments are forwarded to `pd.read_csv`.
        """
        data = self.read_raw(key)
        return pd.read_csv(io.BytesIO(data), encoding="utf-8", **kwargs)


class LocalStorageAdapter(StorageAdapter):
    """
    Local filesystem-backed storage adapter.

    Keys are treated as relative paths under a root directory; absolute
    keys are used as-is.
    Example:
        root_dir = Path("output")
        key      = "charts/health_vs_life.png"
        -> actual path: ./output/charts/health_vs_life.png
    """

    def __init__(self, root_dir: Path | str = ".") -> None:
        self.root_dir = Path(root_dir)

    def _path(self, key: str) -> Path:
        candidate = Path(key)
        if candidate.is_absolute():
            return candidate
        return self.root_dir / key

    def write_raw(self, key: str, content: bytes) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as f:
            f.write(content)
        return str(path)

    def read_raw(self, key: str) -> bytes:
        path = self._path(key)
        with path.open("rb") as f:
            return f.read()

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()
