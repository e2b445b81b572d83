"""Unpacking of gzip-compressed tar archives.

Only regular files and directories are materialised. Symlinks, hard links,
devices and FIFOs are skipped, as are members whose path would land outside
the destination. Extraction runs in a ``.partial`` staging directory that is
renamed into place only once every member was written.
"""

from __future__ import annotations

import os
import shutil
import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

from ..core.errors import ExtractError
from ..util.log import Log

log = Log.create({"service": "provision.archive"})

STAGING_SUFFIX = ".partial"


@dataclass
class ExtractResult:
    destination: Path
    files: int = 0
    directories: int = 0
    skipped: int = 0


def _safe_join(base: Path, relative: Path) -> Optional[Path]:
    try:
        target = (base / relative).resolve()
        base_resolved = base.resolve()
        if target == base_resolved or base_resolved in target.parents:
            return target
    except (OSError, RuntimeError):
        return None
    return None


def _member_path(name: str) -> Optional[Path]:
    pure = PurePosixPath(name)
    if pure.is_absolute():
        return None
    parts = [part for part in pure.parts if part not in ("", ".")]
    if not parts or ".." in parts:
        return None
    return Path(*parts)


def staging_dir(destination: Path) -> Path:
    return destination.with_name(destination.name + STAGING_SUFFIX)


def _write_member(tf: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    src = tf.extractfile(member)
    with open(target, "wb") as dst:
        if src is not None:
            with src:
                shutil.copyfileobj(src, dst)
    if member.mode & 0o111:
        os.chmod(target, 0o755)


def _unpack(archive: Path, staging: Path, result: ExtractResult) -> None:
    with tarfile.open(archive, "r:gz") as tf:
        for member in tf:
            if not (member.isdir() or member.isfile()):
                log.debug("skipping archive entry", {"member": member.name, "type": member.type})
                result.skipped += 1
                continue

            relative = _member_path(member.name)
            target = _safe_join(staging, relative) if relative else None
            if target is None:
                if member.name.strip("./"):
                    log.warn("skipping unsafe archive path", {"member": member.name})
                    result.skipped += 1
                continue

            try:
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                    result.directories += 1
                else:
                    _write_member(tf, member, target)
                    result.files += 1
            except OSError as e:
                raise ExtractError(archive, str(e), member.name) from e


def extract_tar_gz(archive: Path, destination: Path) -> ExtractResult:
    """Unpack ``archive`` into ``destination``, which must not exist yet."""
    if destination.exists():
        raise ExtractError(archive, f"destination {destination.name} already exists")

    staging = staging_dir(destination)
    if staging.exists():
        log.info("removing stale staging directory", {"path": str(staging)})
        shutil.rmtree(staging)
    try:
        staging.mkdir()
    except OSError as e:
        raise ExtractError(archive, f"cannot create {staging.name}: {e}") from e

    result = ExtractResult(destination=destination)
    with log.time("extract", {"archive": str(archive), "destination": str(destination)}):
        try:
            _unpack(archive, staging, result)
        except ExtractError:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise ExtractError(archive, str(e) or type(e).__name__) from e
        try:
            os.rename(staging, destination)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise ExtractError(archive, f"cannot move {staging.name} into place: {e}") from e

    log.info(
        "archive extracted",
        {"files": result.files, "directories": result.directories, "skipped": result.skipped},
    )
    return result
