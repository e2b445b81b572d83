"""Resolution of untyped host options into a launch decision."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from ..util.log import Log
from .config_schema import ExplicitServer, HostOptions, ManagedServer, ResolvedDecision
from .errors import ConfigError

log = Log.create({"service": "config"})

DEFAULT_SERVER_ARGS: tuple[str, ...] = ()


def _first_error_key(error: ValidationError) -> str:
    for item in error.errors():
        loc = item.get("loc") or ()
        if loc:
            return ".".join(str(part) for part in loc)
    return "initializationOptions"


def parse_options(options: Any) -> HostOptions:
    """Validate raw initialization options.

    Anything other than a JSON object carries no settings. A ``lombok``
    value that is not a JSON boolean raises :class:`ConfigError`.
    """
    if not isinstance(options, Mapping):
        return HostOptions()
    try:
        return HostOptions.model_validate(dict(options))
    except ValidationError as e:
        key = _first_error_key(e)
        raise ConfigError(key, e.errors()[0].get("msg", str(e))) from e


def server_uri(server_path: str) -> str:
    """Turn a configured server path into the URI handed to the host.

    ``file:`` URIs pass through; anything else is a path or command name and
    is wrapped in the ``urn:`` scheme the host resolves as-is.
    """
    if server_path.startswith("file:"):
        return server_path
    return f"urn:{server_path}"


def _collect_args(supplied: Optional[List[str]]) -> List[str]:
    args = list(DEFAULT_SERVER_ARGS)
    if supplied:
        # explicit args replace the defaults, they are never merged
        args = list(supplied)
    return args


def resolve(options: Any) -> ResolvedDecision:
    """Decide between an explicit server and managed provisioning."""
    parsed = parse_options(options)
    args = _collect_args(parsed.volt.server_args)

    server_path = parsed.volt.server_path
    if server_path:
        decision: ResolvedDecision = ExplicitServer(uri=server_uri(server_path), args=tuple(args))
        log.info("using configured server", {"uri": decision.uri, "args": len(args)})
        return decision

    log.info("using managed server", {"lombok": parsed.lombok, "args": len(args)})
    return ManagedServer(agent_enabled=parsed.lombok, args=tuple(args))
