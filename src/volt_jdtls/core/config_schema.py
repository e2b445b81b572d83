"""Configuration schema — Pydantic models for host-supplied options."""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator


class VoltOptions(BaseModel):
    """The ``volt`` section of the initialization options.

    Values of the wrong shape are treated as absent: a non-array
    ``serverArgs`` or a non-string ``serverPath`` is dropped, and non-string
    elements of ``serverArgs`` are skipped.
    """
    server_args: Optional[List[str]] = Field(None, alias="serverArgs")
    server_path: Optional[str] = Field(None, alias="serverPath")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_malformed(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        data: dict[str, Any] = {}
        args = value.get("serverArgs")
        if isinstance(args, list):
            data["serverArgs"] = [arg for arg in args if isinstance(arg, str)]
        path = value.get("serverPath")
        if isinstance(path, str):
            data["serverPath"] = path
        return data


class HostOptions(BaseModel):
    """Initialization options sent by the host with the initialize request."""
    lombok: StrictBool = False
    volt: VoltOptions = Field(default_factory=VoltOptions)

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("volt", mode="before")
    @classmethod
    def _object_only(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class ExplicitServer(BaseModel):
    """The host names the backend executable itself."""
    kind: Literal["explicit"] = "explicit"
    uri: str
    args: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class ManagedServer(BaseModel):
    """The plugin provisions the backend into its working directory."""
    kind: Literal["managed"] = "managed"
    agent_enabled: bool = False
    args: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


ResolvedDecision = Union[ExplicitServer, ManagedServer]
