"""Launch descriptors handed to the host's start operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..util.log import Log

log = Log.create({"service": "plugin.launch"})

LANGUAGE_ID = "java"
FILE_PATTERN = "**/*.java"


class Host(Protocol):
    """Operations the host runtime exposes to the plugin."""

    def start_lsp(
        self,
        server_uri: str,
        server_args: List[str],
        document_selector: List[Dict[str, Any]],
        options: Any,
    ) -> None: ...

    def stderr(self, message: str) -> None: ...


@dataclass(frozen=True)
class DocumentFilter:
    language: Optional[str] = None
    pattern: Optional[str] = None
    scheme: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"language": self.language, "pattern": self.pattern, "scheme": self.scheme}


DOCUMENT_SELECTOR: Tuple[DocumentFilter, ...] = (
    DocumentFilter(language=LANGUAGE_ID, pattern=FILE_PATTERN),
)


@dataclass(frozen=True)
class LaunchDescriptor:
    """Everything the host needs to start the backend.

    ``options`` is the host's own initialization options object, passed back
    untouched.
    """
    server_uri: str
    server_args: Tuple[str, ...]
    document_selector: Tuple[DocumentFilter, ...] = DOCUMENT_SELECTOR
    options: Any = field(default=None, compare=False)

    def to_params(self) -> Dict[str, Any]:
        return {
            "server_uri": self.server_uri,
            "server_args": list(self.server_args),
            "document_selector": [item.to_dict() for item in self.document_selector],
            "options": self.options,
        }


def compose(server_uri: str, server_args: Sequence[str], options: Any) -> LaunchDescriptor:
    return LaunchDescriptor(server_uri=server_uri, server_args=tuple(server_args), options=options)


def launch(host: Host, descriptor: LaunchDescriptor) -> None:
    """Ask the host to start the backend described by ``descriptor``."""
    log.info("starting language server", {"uri": descriptor.server_uri, "args": list(descriptor.server_args)})
    host.start_lsp(
        descriptor.server_uri,
        list(descriptor.server_args),
        [item.to_dict() for item in descriptor.document_selector],
        descriptor.options,
    )
