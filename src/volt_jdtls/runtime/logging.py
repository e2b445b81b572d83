"""Runtime logging bootstrap helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.environment import PluginSettings
from ..util.log import Log, LogFormat, LogLevel


@dataclass(frozen=True)
class LogSettings:
    level: LogLevel
    format: LogFormat
    file: bool


def bootstrap_logging(
    settings: PluginSettings,
    *,
    level: Optional[str] = None,
    file: bool = False,
) -> LogSettings:
    """Configure the process logger from settings and CLI overrides.

    Console output always goes to stderr, which the host collects; stdout is
    reserved for the RPC channel.
    """
    resolved = LogSettings(
        level=LogLevel.parse(level) if level else settings.level,
        format=settings.format,
        file=file,
    )
    Log.configure(level=resolved.level, format=resolved.format, console=True, file=resolved.file)
    return resolved
