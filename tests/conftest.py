from __future__ import annotations

import io
import tarfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from volt_jdtls.core.environment import PluginSettings
from volt_jdtls.provision.download import Downloader
from volt_jdtls.util.log import Log, LogFormat, LogLevel


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=False, file=False)
    yield
    Log.close()


class FakeHost:
    """Records start_lsp calls and diagnostic lines."""

    def __init__(self) -> None:
        self.started: list[dict[str, Any]] = []
        self.lines: list[str] = []

    def start_lsp(self, server_uri, server_args, document_selector, options) -> None:  # type: ignore[no-untyped-def]
        self.started.append(
            {
                "server_uri": server_uri,
                "server_args": server_args,
                "document_selector": document_selector,
                "options": options,
            }
        )

    def stderr(self, message: str) -> None:
        self.lines.append(message)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def settings(tmp_path: Path) -> PluginSettings:
    return PluginSettings.model_validate({"VOLT_URI": tmp_path.as_uri() + "/"})


# (name, kind, payload); kind is file, exec, dir, symlink, hardlink or fifo
TarEntry = tuple[str, str, Any]


def build_tar_gz(path: Path, entries: list[TarEntry]) -> Path:
    with tarfile.open(path, "w:gz") as tf:
        for name, kind, payload in entries:
            info = tarfile.TarInfo(name)
            if kind == "file":
                data = payload if isinstance(payload, bytes) else str(payload or "").encode()
                info.size = len(data)
                info.mode = 0o644
                tf.addfile(info, io.BytesIO(data))
            elif kind == "exec":
                data = payload if isinstance(payload, bytes) else str(payload or "").encode()
                info.size = len(data)
                info.mode = 0o755
                tf.addfile(info, io.BytesIO(data))
            elif kind == "dir":
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tf.addfile(info)
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = str(payload)
                tf.addfile(info)
            elif kind == "hardlink":
                info.type = tarfile.LNKTYPE
                info.linkname = str(payload)
                tf.addfile(info)
            elif kind == "fifo":
                info.type = tarfile.FIFOTYPE
                tf.addfile(info)
            else:
                raise ValueError(kind)
    return path


@pytest.fixture
def tar_gz() -> Callable[[Path, list[TarEntry]], Path]:
    return build_tar_gz


@pytest.fixture
def jdtls_archive(tmp_path: Path) -> bytes:
    source = tmp_path / "source.tar.gz"
    build_tar_gz(
        source,
        [
            ("bin", "dir", None),
            ("bin/jdtls", "exec", "#!/usr/bin/env python3\n"),
            ("plugins", "dir", None),
            ("plugins/org.eclipse.jdt.ls.core.jar", "file", b"PK\x03\x04"),
            ("config_linux/config.ini", "file", "osgi.bundles=\n"),
        ],
    )
    data = source.read_bytes()
    source.unlink()
    return data


class FakeServer:
    """URL routes served through httpx.MockTransport."""

    def __init__(self, routes: dict[str, tuple[int, bytes]]) -> None:
        self.routes = routes
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        status, body = self.routes.get(url, (404, b"not found"))
        return httpx.Response(status, content=body)

    def downloader(self) -> Downloader:
        return Downloader(transport=httpx.MockTransport(self))


@pytest.fixture
def fake_server() -> Callable[[dict[str, tuple[int, bytes]]], FakeServer]:
    return FakeServer
