"""Filesystem-backed idempotency for downloaded artifacts.

Presence on disk is the only cache state: an extracted directory means the
artifact is provisioned, a local archive means it only needs unpacking.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..util.log import Log
from .archive import extract_tar_gz
from .download import Downloader

log = Log.create({"service": "provision.cache"})


@dataclass(frozen=True)
class ArtifactLocation:
    """Where an artifact comes from and where it lands locally.

    ``directory`` is ``None`` for single-file artifacts that are used as
    downloaded.
    """
    name: str
    url: str
    filename: str
    directory: Optional[str] = None

    @classmethod
    def tar_gz(cls, name: str, url: str) -> "ArtifactLocation":
        return cls(name=name, url=url, filename=f"{name}.tar.gz", directory=name)

    @classmethod
    def file(cls, filename: str, url: str) -> "ArtifactLocation":
        return cls(name=filename, url=url, filename=filename)


class ArtifactCache:
    """Ensures artifacts exist under ``root``, fetching them at most once."""

    def __init__(self, root: Path, downloader: Downloader):
        self.root = root
        self.downloader = downloader
        self.extractions = 0

    def file_path(self, location: ArtifactLocation) -> Path:
        return self.root / location.filename

    def directory_path(self, location: ArtifactLocation) -> Optional[Path]:
        if location.directory is None:
            return None
        return self.root / location.directory

    def needs_download(self, location: ArtifactLocation) -> bool:
        directory = self.directory_path(location)
        if directory is not None and directory.exists():
            return False
        return not self.file_path(location).exists()

    def needs_extraction(self, location: ArtifactLocation) -> bool:
        directory = self.directory_path(location)
        return directory is not None and not directory.exists()

    def ensure(self, location: ArtifactLocation) -> Path:
        """Return the local path of ``location``, provisioning it if needed."""
        directory = self.directory_path(location)
        if directory is not None and directory.exists():
            log.debug("artifact already provisioned", {"artifact": location.name})
            return directory

        archive = self.file_path(location)
        if self.needs_download(location):
            log.info("fetching artifact", {"artifact": location.name, "url": location.url})
            self.downloader.fetch(location.url, archive)
        else:
            log.debug("using cached download", {"artifact": location.name, "path": str(archive)})

        if directory is None:
            return archive

        self.extractions += 1
        extract_tar_gz(archive, directory)
        return directory
