from pathlib import Path

import pytest

from volt_jdtls.core.environment import Workdir
from volt_jdtls.core.errors import AgentPathError
from volt_jdtls.provision.agent import agent_argument, lombok_location, provision_agent
from volt_jdtls.provision.cache import ArtifactCache

LOMBOK = "https://lombok.example/lombok.jar"


def test_agent_argument_format() -> None:
    assert agent_argument("/p/lombok.jar") == "--jvm-arg=-javaagent:/p/lombok.jar"


def test_agent_is_downloaded_and_appended_last(tmp_path: Path, fake_server) -> None:  # type: ignore[no-untyped-def]
    server = fake_server({LOMBOK: (200, b"jar")})
    cache = ArtifactCache(tmp_path, server.downloader())
    workdir = Workdir(tmp_path, tmp_path.as_uri() + "/")

    args = provision_agent(cache, workdir, lombok_location(LOMBOK), ["-data", "/ws"])

    assert args[:2] == ["-data", "/ws"]
    assert args[-1] == agent_argument(str(tmp_path / "lombok.jar"))
    assert (tmp_path / "lombok.jar").read_bytes() == b"jar"


def test_present_agent_is_not_downloaded_again(tmp_path: Path, fake_server) -> None:  # type: ignore[no-untyped-def]
    (tmp_path / "lombok.jar").write_bytes(b"old")
    server = fake_server({})
    cache = ArtifactCache(tmp_path, server.downloader())
    workdir = Workdir(tmp_path, tmp_path.as_uri())

    args = provision_agent(cache, workdir, lombok_location(LOMBOK), [])

    assert server.requests == []
    assert args == [agent_argument(str(tmp_path / "lombok.jar"))]


def test_non_file_workdir_uri_is_fatal(tmp_path: Path, fake_server) -> None:  # type: ignore[no-untyped-def]
    server = fake_server({LOMBOK: (200, b"jar")})
    cache = ArtifactCache(tmp_path, server.downloader())
    workdir = Workdir(tmp_path, "https://plugins.example/jdtls/")

    with pytest.raises(AgentPathError):
        provision_agent(cache, workdir, lombok_location(LOMBOK), [])
