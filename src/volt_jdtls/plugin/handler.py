"""Handling of the host's initialize handshake.

On ``initialize`` the handler resolves the host options, provisions the
managed backend when no server path is configured, and asks the host to start
it. Every other request is ignored.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.config import resolve
from ..core.config_schema import ExplicitServer, ManagedServer, ResolvedDecision
from ..core.environment import JDTLS_NAME, PluginSettings, Workdir
from ..core.errors import ConfigError
from ..provision.agent import lombok_location, provision_agent
from ..provision.cache import ArtifactCache, ArtifactLocation
from ..provision.download import Downloader
from ..util.log import Log
from .launch import Host, LaunchDescriptor, compose, launch

log = Log.create({"service": "plugin.handler"})

INITIALIZE = "initialize"
SERVER_EXECUTABLE = f"{JDTLS_NAME}/bin/jdtls"


class HandlerState(str, Enum):
    IDLE = "idle"
    STARTED = "started"


class InitializeParams(BaseModel):
    """The part of the LSP initialize params the plugin reads."""
    initialization_options: Any = Field(None, alias="initializationOptions")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class InitializationHandler:
    """Runs resolution, provisioning and launch for each initialize request."""

    def __init__(
        self,
        host: Host,
        settings: Optional[PluginSettings] = None,
        *,
        root: Optional[Path] = None,
        downloader: Optional[Downloader] = None,
    ) -> None:
        self.host = host
        self.settings = settings or PluginSettings.from_env()
        self.workdir = Workdir.from_settings(self.settings, root)
        self._downloader = downloader
        self.state = HandlerState.IDLE

    def handle_request(self, id: Any, method: str, params: Any) -> Optional[LaunchDescriptor]:
        if method != INITIALIZE:
            log.debug("ignoring request", {"id": id, "method": method})
            return None
        try:
            parsed = InitializeParams.model_validate(params if params is not None else {})
        except ValidationError as e:
            raise ConfigError("params", str(e)) from e
        return self.initialize(parsed.initialization_options)

    def initialize(self, options: Any) -> LaunchDescriptor:
        decision = resolve(options)
        descriptor = self.descriptor_for(decision, options)
        launch(self.host, descriptor)
        self.state = HandlerState.STARTED
        return descriptor

    def descriptor_for(self, decision: ResolvedDecision, options: Any) -> LaunchDescriptor:
        if isinstance(decision, ExplicitServer):
            return compose(decision.uri, decision.args, options)
        if isinstance(decision, ManagedServer):
            return self._provision(decision, options)
        raise TypeError(f"unknown launch decision: {decision!r}")

    def server_location(self) -> ArtifactLocation:
        return ArtifactLocation.tar_gz(JDTLS_NAME, self.settings.server_url)

    def _provision(self, decision: ManagedServer, options: Any) -> LaunchDescriptor:
        server_uri = self.workdir.join(SERVER_EXECUTABLE)
        downloader = self._downloader or Downloader()
        try:
            cache = ArtifactCache(self.workdir.root, downloader)
            cache.ensure(self.server_location())

            args = list(decision.args)
            if decision.agent_enabled:
                args = provision_agent(cache, self.workdir, lombok_location(self.settings.lombok_url), args)
        finally:
            if self._downloader is None:
                downloader.close()

        return compose(server_uri, args, options)
