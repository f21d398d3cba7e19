"""
Artifact linker boundary.

The build produces a static archive; getting it into the final host binary is
the host's business. This module defines the one call the build makes on the
host side, plus two small implementations.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List


class ForeignFileKind(Enum):
    """Kind of file handed to the host linker."""

    RAW_OBJECT = "raw-object"


@dataclass(frozen=True)
class LinkedArtifact:
    """An artifact registered with the host linker."""

    kind: ForeignFileKind
    path: Path


class ArtifactLinker(ABC):
    """Host-side hook that takes ownership of built artifacts."""

    @abstractmethod
    def register_artifact(self, kind: ForeignFileKind, path: Path) -> None:
        """Register a file for inclusion in the host's link step."""
        ...


class CollectingLinker(ArtifactLinker):
    """Keeps registered artifacts in memory for the driver to pick up."""

    def __init__(self):
        self.artifacts: List[LinkedArtifact] = []

    def register_artifact(self, kind: ForeignFileKind, path: Path) -> None:
        self.artifacts.append(LinkedArtifact(kind=kind, path=Path(path)))
        logging.info(f"Registered {kind.value} artifact: {path}")

    def paths(self) -> List[Path]:
        return [artifact.path for artifact in self.artifacts]


class LinkListLinker(ArtifactLinker):
    """
    Appends artifacts to a link-list file.

    Each line is ``<kind>\\t<absolute path>``; a host build script reads the
    file and passes the archives to its linker.
    """

    def __init__(self, list_path: Path):
        self.list_path = Path(list_path)

    def register_artifact(self, kind: ForeignFileKind, path: Path) -> None:
        self.list_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.list_path, "a", encoding="utf-8") as f:
            f.write(f"{kind.value}\t{Path(path).resolve()}\n")
        logging.info(f"Added {path} to link list {self.list_path}")

    def read(self) -> List[LinkedArtifact]:
        """Read back all entries of the link list."""
        if not self.list_path.exists():
            return []
        entries = []
        for line in self.list_path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            kind, _, path = line.partition("\t")
            entries.append(LinkedArtifact(kind=ForeignFileKind(kind), path=Path(path)))
        return entries
