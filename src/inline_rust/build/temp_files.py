"""Temporary File Manager.

This module hands out unique temporary file paths for one process and keeps
track of them so they can be removed when the build is over.

Design:
    - All paths live in one private directory created lazily with tempfile.mkdtemp
    - Each path gets a unique name (counter + random suffix), so units
      built in the same run never collide
    - A path handed off to the linker is forgotten and never deleted by
      cleanup(); once anything has been handed off the private directory is
      left in place for the host to link from
"""

import logging
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional


class TempFileManager:
    """Allocates process-scoped temporary paths and cleans them up.

    Example usage:
        with TempFileManager() as temps:
            src = temps.new_path("rs")
            out = temps.new_path("a")
            ...
            temps.hand_off(out)
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        prefix: str = "inline-rust-",
        keep: bool = False
    ):
        """Initialize temporary file manager.

        Args:
            base_dir: Where to create the private directory (default: system temp)
            prefix: Prefix for the private directory name
            keep: Never delete anything (useful for debugging rustc failures)
        """
        self.base_dir = Path(base_dir) if base_dir else None
        self.prefix = prefix
        self.keep = keep
        self._root: Optional[Path] = None
        self._counter = 0
        self._owned: List[Path] = []
        self._has_handed_off = False

    @property
    def root(self) -> Path:
        """Private directory holding all temporary paths (created on first use)."""
        if self._root is None:
            if self.base_dir is not None:
                self.base_dir.mkdir(parents=True, exist_ok=True)
            self._root = Path(
                tempfile.mkdtemp(prefix=self.prefix, dir=str(self.base_dir) if self.base_dir else None)
            )
            logging.debug(f"Created temporary directory {self._root}")
        return self._root

    def new_path(self, suffix: str) -> Path:
        """Return a fresh, unused file path with the given extension.

        The file itself is not created.

        Args:
            suffix: File extension without the dot (e.g. "rs", "a")
        """
        self._counter += 1
        path = self.root / f"tmp_{self._counter}_{uuid.uuid4().hex[:8]}.{suffix}"
        self._owned.append(path)
        return path

    def new_dir(self, prefix: str = "work-") -> Path:
        """Create and return a fresh, unique directory."""
        path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(self.root)))
        self._owned.append(path)
        return path

    def hand_off(self, path: Path) -> None:
        """Transfer ownership of a path; cleanup() will leave it in place."""
        path = Path(path)
        self._owned = [p for p in self._owned if p != path]
        self._has_handed_off = True

    def is_owned(self, path: Path) -> bool:
        return Path(path) in self._owned

    def cleanup(self) -> None:
        """Delete every path that hasn't been handed off."""
        if self.keep:
            logging.info(f"Keeping temporary files in {self._root}")
            return

        for path in self._owned:
            if path.is_dir():
                shutil.rmtree(path, ignore_errors=True)
            elif path.exists():
                path.unlink()
        self._owned = []

        # The private directory goes too, unless it still holds handed-off files
        if self._root is not None and not self._has_handed_off:
            shutil.rmtree(self._root, ignore_errors=True)
            logging.debug(f"Removed temporary directory {self._root}")
            self._root = None

    def __enter__(self) -> "TempFileManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
