"""Optional javaagent injected into the backend's JVM."""

from __future__ import annotations

from typing import List

from ..core.environment import LOMBOK_JAR, Workdir
from ..util.log import Log
from .cache import ArtifactCache, ArtifactLocation

log = Log.create({"service": "provision.agent"})


def agent_argument(path: str) -> str:
    return f"--jvm-arg=-javaagent:{path}"


def lombok_location(url: str) -> ArtifactLocation:
    return ArtifactLocation.file(LOMBOK_JAR, url)


def provision_agent(
    cache: ArtifactCache,
    workdir: Workdir,
    location: ArtifactLocation,
    args: List[str],
) -> List[str]:
    """Ensure the agent jar exists and append its launch argument.

    The jar is located through the working-directory URI; a URI that is not
    a local file path raises :class:`AgentPathError`.
    """
    cache.ensure(location)
    jar = workdir.file_path(location.filename)
    log.info("enabling javaagent", {"jar": str(jar)})
    return [*args, agent_argument(str(jar))]
