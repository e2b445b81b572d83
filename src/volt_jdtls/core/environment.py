"""Process settings and the plugin working directory.

The host starts the plugin inside its volt directory and passes that
directory's URI in ``VOLT_URI``. Logging and download mirrors can be tuned
through ``VOLT_JDTLS_*`` variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import unquote, urljoin, urlparse
from urllib.request import url2pathname

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..util.log import LogFormat, LogLevel
from .errors import AgentPathError, ConfigError, WorkdirError

JDTLS_NAME = "jdt-language-server-latest"
JDTLS_URL = f"https://download.eclipse.org/jdtls/snapshots/{JDTLS_NAME}.tar.gz"
LOMBOK_JAR = "lombok.jar"
LOMBOK_URL = f"https://projectlombok.org/downloads/{LOMBOK_JAR}"


class PluginSettings(BaseModel):
    """Settings read from the process environment."""
    volt_uri: Optional[str] = Field(None, alias="VOLT_URI")
    log_level: str = Field("info", alias="VOLT_JDTLS_LOG_LEVEL")
    log_format: str = Field("kv", alias="VOLT_JDTLS_LOG_FORMAT")
    server_url: str = Field(JDTLS_URL, alias="VOLT_JDTLS_SERVER_URL")
    lombok_url: str = Field(LOMBOK_URL, alias="VOLT_JDTLS_LOMBOK_URL")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("log_level")
    @classmethod
    def _valid_level(cls, value: str) -> str:
        LogLevel.parse(value)
        return value

    @field_validator("log_format")
    @classmethod
    def _valid_format(cls, value: str) -> str:
        LogFormat.parse(value)
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PluginSettings":
        source = os.environ if environ is None else environ
        fields = {
            field.alias: source[field.alias]
            for field in cls.model_fields.values()
            if field.alias and source.get(field.alias)
        }
        try:
            return cls.model_validate(fields)
        except ValidationError as e:
            loc = e.errors()[0].get("loc") or ("environment",)
            raise ConfigError(str(loc[0]), e.errors()[0].get("msg", str(e))) from e

    @property
    def level(self) -> LogLevel:
        return LogLevel.parse(self.log_level)

    @property
    def format(self) -> LogFormat:
        return LogFormat.parse(self.log_format)


class Workdir:
    """The plugin working directory, as a filesystem root and a URI."""

    def __init__(self, root: Path, uri: Optional[str]):
        self.root = root
        self._uri = uri

    @classmethod
    def from_settings(cls, settings: PluginSettings, root: Optional[Path] = None) -> "Workdir":
        return cls(root or Path.cwd(), settings.volt_uri)

    @property
    def uri(self) -> str:
        if not self._uri:
            raise WorkdirError("plugin working directory URI (VOLT_URI) is not set")
        return self._uri

    def path(self, name: str) -> Path:
        return self.root / name

    def join(self, relative: str) -> str:
        """Resolve ``relative`` against the working-directory URI."""
        base = self.uri
        if not base.endswith("/"):
            base += "/"
        return urljoin(base, relative)

    def file_path(self, relative: str) -> Path:
        """Resolve ``relative`` to an absolute filesystem path via the URI."""
        uri = self.join(relative)
        return uri_to_path(uri)


def uri_to_path(uri: str) -> Path:
    """Convert a ``file:`` URI to a path, raising :class:`AgentPathError`."""
    parsed = urlparse(uri)
    if parsed.scheme != "file" or parsed.netloc not in ("", "localhost"):
        raise AgentPathError(uri)
    path = url2pathname(parsed.path) if os.name == "nt" else unquote(parsed.path)
    if not path:
        raise AgentPathError(uri)
    return Path(path)
