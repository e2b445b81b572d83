import os
import stat
from pathlib import Path

import pytest

from volt_jdtls.core.errors import ExtractError
from volt_jdtls.provision.archive import extract_tar_gz, staging_dir


def test_extracts_files_and_directories(tmp_path: Path, tar_gz) -> None:  # type: ignore[no-untyped-def]
    archive = tar_gz(
        tmp_path / "server.tar.gz",
        [
            ("bin", "dir", None),
            ("bin/jdtls", "exec", "#!/bin/sh\n"),
            ("plugins/deep/nested/core.jar", "file", b"\x00\x01\x02"),
            ("./README", "file", "hello"),
        ],
    )
    destination = tmp_path / "server"

    result = extract_tar_gz(archive, destination)

    assert (destination / "bin" / "jdtls").read_text() == "#!/bin/sh\n"
    assert (destination / "plugins" / "deep" / "nested" / "core.jar").read_bytes() == b"\x00\x01\x02"
    assert (destination / "README").read_text() == "hello"
    assert result.files == 3
    assert result.directories == 1
    assert not staging_dir(destination).exists()


@pytest.mark.skipif(os.name == "nt", reason="posix permissions")
def test_executable_bit_is_preserved(tmp_path: Path, tar_gz) -> None:  # type: ignore[no-untyped-def]
    archive = tar_gz(tmp_path / "a.tar.gz", [("bin/jdtls", "exec", "x"), ("notes.txt", "file", "y")])
    destination = tmp_path / "out"

    extract_tar_gz(archive, destination)

    assert (destination / "bin" / "jdtls").stat().st_mode & stat.S_IXUSR
    assert not (destination / "notes.txt").stat().st_mode & stat.S_IXUSR


def test_symlinks_and_special_entries_are_never_materialised(tmp_path: Path, tar_gz) -> None:  # type: ignore[no-untyped-def]
    archive = tar_gz(
        tmp_path / "a.tar.gz",
        [
            ("real.txt", "file", "data"),
            ("evil", "symlink", "/etc/passwd"),
            ("hard", "hardlink", "real.txt"),
            ("pipe", "fifo", None),
        ],
    )
    destination = tmp_path / "out"

    result = extract_tar_gz(archive, destination)

    assert (destination / "real.txt").read_text() == "data"
    assert not os.path.lexists(destination / "evil")
    assert not os.path.lexists(destination / "hard")
    assert not os.path.lexists(destination / "pipe")
    assert result.skipped == 3


@pytest.mark.parametrize("name", ["../escaped.txt", "a/../../escaped.txt", "/abs/escaped.txt"])
def test_traversal_paths_are_skipped(tmp_path: Path, tar_gz, name: str) -> None:  # type: ignore[no-untyped-def]
    work = tmp_path / "work"
    work.mkdir()
    archive = tar_gz(work / "a.tar.gz", [(name, "file", "pwned"), ("ok.txt", "file", "fine")])
    destination = work / "out"

    result = extract_tar_gz(archive, destination)

    assert (destination / "ok.txt").read_text() == "fine"
    assert not (work / "escaped.txt").exists()
    assert not (tmp_path / "escaped.txt").exists()
    assert not Path("/abs/escaped.txt").exists()
    assert result.skipped == 1


def test_existing_destination_is_refused(tmp_path: Path, tar_gz) -> None:  # type: ignore[no-untyped-def]
    archive = tar_gz(tmp_path / "a.tar.gz", [("x.txt", "file", "x")])
    destination = tmp_path / "out"
    destination.mkdir()

    with pytest.raises(ExtractError):
        extract_tar_gz(archive, destination)

    assert list(destination.iterdir()) == []


def test_corrupt_archive_leaves_no_directory_behind(tmp_path: Path) -> None:
    archive = tmp_path / "broken.tar.gz"
    archive.write_bytes(b"this is not gzip")
    destination = tmp_path / "out"

    with pytest.raises(ExtractError) as exc:
        extract_tar_gz(archive, destination)

    assert exc.value.archive == archive
    assert not destination.exists()
    assert not staging_dir(destination).exists()


def test_truncated_archive_rolls_back_partial_output(tmp_path: Path, tar_gz) -> None:  # type: ignore[no-untyped-def]
    archive = tar_gz(tmp_path / "a.tar.gz", [("small.txt", "file", "ok"), ("big.bin", "file", os.urandom(65536))])
    data = archive.read_bytes()
    archive.write_bytes(data[: len(data) // 2])
    destination = tmp_path / "out"

    with pytest.raises(ExtractError):
        extract_tar_gz(archive, destination)

    assert not destination.exists()
    assert not staging_dir(destination).exists()


def test_stale_staging_directory_is_replaced(tmp_path: Path, tar_gz) -> None:  # type: ignore[no-untyped-def]
    archive = tar_gz(tmp_path / "a.tar.gz", [("x.txt", "file", "x")])
    destination = tmp_path / "out"
    stale = staging_dir(destination)
    stale.mkdir()
    (stale / "leftover.txt").write_text("old")

    extract_tar_gz(archive, destination)

    assert (destination / "x.txt").read_text() == "x"
    assert not (destination / "leftover.txt").exists()
    assert not stale.exists()


def test_multi_member_gzip_is_read_in_full(tmp_path: Path) -> None:
    import gzip
    import io
    import tarfile

    raw = io.BytesIO()
    with tarfile.open(fileobj=raw, mode="w") as tf:
        for name in ("first.txt", "second.txt"):
            payload = name.encode()
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            tf.addfile(info, io.BytesIO(payload))
    tar_bytes = raw.getvalue()
    split = 512 * 2
    archive = tmp_path / "multi.tar.gz"
    archive.write_bytes(gzip.compress(tar_bytes[:split]) + gzip.compress(tar_bytes[split:]))
    destination = tmp_path / "out"

    extract_tar_gz(archive, destination)

    assert (destination / "first.txt").read_text() == "first.txt"
    assert (destination / "second.txt").read_text() == "second.txt"
