"""JSON-RPC adapter between the host and the initialization handler."""

from __future__ import annotations

import sys
from typing import Any, BinaryIO, Callable, Dict, List, Optional, TextIO

from pylsp_jsonrpc.streams import JsonRpcStreamReader, JsonRpcStreamWriter

from ..core.errors import VoltError
from ..util.error import format_error, format_unknown_error
from ..util.log import Log
from .handler import InitializationHandler

log = Log.create({"service": "plugin.rpc"})

START_LSP = "start_lsp"


class PluginRpc:
    """Host operations carried over the plugin's stdio.

    Requests arrive on ``rfile`` and notifications for the host go to
    ``wfile``, both framed with Content-Length headers. Diagnostic lines are
    written to ``err``.
    """

    def __init__(self, rfile: BinaryIO, wfile: BinaryIO, err: Optional[TextIO] = None):
        self._reader = JsonRpcStreamReader(rfile)
        self._writer = JsonRpcStreamWriter(wfile)
        self._err = err

    def start_lsp(
        self,
        server_uri: str,
        server_args: List[str],
        document_selector: List[Dict[str, Any]],
        options: Any,
    ) -> None:
        self._writer.write({
            "jsonrpc": "2.0",
            "method": START_LSP,
            "params": {
                "server_uri": server_uri,
                "server_args": server_args,
                "document_selector": document_selector,
                "options": options,
            },
        })

    def stderr(self, message: str) -> None:
        """Best-effort diagnostic line; never raises."""
        stream = self._err or sys.stderr
        try:
            stream.write(message + "\n")
            stream.flush()
        except (OSError, ValueError) as e:
            log.debug("diagnostic sink unavailable", {"error": str(e)})

    def listen(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        self._reader.listen(callback)

    def close(self) -> None:
        self._reader.close()
        self._writer.close()


class Plugin:
    """Dispatches inbound host messages and reports failures to the host."""

    def __init__(self, rpc: PluginRpc, handler: Optional[InitializationHandler] = None):
        self.rpc = rpc
        self.handler = handler or InitializationHandler(rpc)

    def handle_message(self, message: Dict[str, Any]) -> None:
        method = message.get("method")
        if not isinstance(method, str):
            log.debug("ignoring message without method", {"id": message.get("id")})
            return
        self.handle_request(message.get("id"), method, message.get("params"))

    def handle_request(self, id: Any, method: str, params: Any) -> None:
        try:
            self.rpc.stderr(f"{id}, {method}")
            self.handler.handle_request(id, method, params)
        except VoltError as e:
            log.error("request failed", {"id": id, "method": method, "error": e})
            self.rpc.stderr(format_error(e) or str(e))
        except Exception as e:
            log.error("unexpected error handling request", {"id": id, "method": method, "error": e})
            self.rpc.stderr(format_unknown_error(e))

    def serve(self) -> None:
        log.info("plugin listening")
        try:
            self.rpc.listen(self.handle_message)
        finally:
            log.info("host closed the connection")


def stdio_plugin(handler_factory: Optional[Callable[[PluginRpc], InitializationHandler]] = None) -> Plugin:
    rpc = PluginRpc(sys.stdin.buffer, sys.stdout.buffer, sys.stderr)
    handler = handler_factory(rpc) if handler_factory else None
    return Plugin(rpc, handler)
