"""Error formatting for the host's diagnostic sink."""

import json
import traceback
from typing import Any

from ..core.errors import (
    AgentPathError,
    ConfigError,
    DownloadError,
    ExtractError,
    VoltError,
    WorkdirError,
)


def format_error(error: Any) -> str | None:
    """Format known plugin errors into user-facing messages.

    Returns None for anything else so callers can fall back to
    :func:`format_unknown_error`.
    """
    if isinstance(error, ConfigError):
        return f"Invalid jdtls plugin setting \"{error.key}\": {error}"
    if isinstance(error, DownloadError):
        if error.status_code is not None:
            return f"Could not download {error.url} (HTTP {error.status_code})"
        return f"Could not download {error.url}: {error.__cause__ or error}"
    if isinstance(error, ExtractError):
        return f"Could not unpack {error.archive.name}: {error}"
    if isinstance(error, AgentPathError):
        return f"Could not locate the lombok agent: {error}"
    if isinstance(error, WorkdirError):
        return f"Plugin working directory unavailable: {error}"
    if isinstance(error, VoltError):
        return str(error)
    return None


def format_unknown_error(error: Any) -> str:
    """Format any error into a string representation."""
    if isinstance(error, BaseException):
        if error.__traceback__:
            return "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return f"{error.__class__.__name__}: {error}"

    if isinstance(error, (dict, list)):
        try:
            return json.dumps(error, indent=2)
        except (TypeError, ValueError):
            return "Unexpected error (unserializable)"

    return str(error)
