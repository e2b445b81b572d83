"""Errors raised while resolving, provisioning and launching the backend.

Every error aborts the current initialize call. The host adapter reports them
through the diagnostic sink and keeps the process alive.
"""

from __future__ import annotations

from pathlib import Path


class VoltError(Exception):
    """Base class for plugin errors."""


class ConfigError(VoltError):
    """Raised when a configuration value is malformed."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Config error in {key}: {message}")


class DownloadError(VoltError):
    """Raised when an artifact cannot be fetched."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to download {url}: {message}")


class ExtractError(VoltError):
    """Raised when an archive cannot be unpacked."""

    def __init__(self, archive: Path, message: str, member: str | None = None):
        self.archive = archive
        self.member = member
        where = f" ({member})" if member else ""
        super().__init__(f"Failed to extract {archive.name}{where}: {message}")


class WorkdirError(VoltError):
    """Raised when the plugin working-directory URI is missing or unusable."""


class AgentPathError(WorkdirError):
    """Raised when the agent jar location is not a filesystem path."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Cannot resolve {uri} to a file path")
