"""Configuration, environment and error types."""

from .errors import AgentPathError, ConfigError, DownloadError, ExtractError, VoltError, WorkdirError


# config imports the logger, which itself depends on core.global_paths
def __getattr__(name: str):
    if name in ("parse_options", "resolve", "server_uri"):
        from . import config
        return getattr(config, name)
    if name in ("ExplicitServer", "HostOptions", "ManagedServer", "ResolvedDecision", "VoltOptions"):
        from . import config_schema
        return getattr(config_schema, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AgentPathError",
    "ConfigError",
    "DownloadError",
    "ExplicitServer",
    "ExtractError",
    "HostOptions",
    "ManagedServer",
    "ResolvedDecision",
    "VoltError",
    "VoltOptions",
    "WorkdirError",
    "parse_options",
    "resolve",
    "server_uri",
]
