"""Host-facing side of the plugin.

Example:
    from volt_jdtls.plugin import stdio_plugin

    stdio_plugin().serve()
"""

from .handler import HandlerState, InitializationHandler, InitializeParams
from .launch import DOCUMENT_SELECTOR, DocumentFilter, Host, LaunchDescriptor
from .rpc import Plugin, PluginRpc, stdio_plugin

__all__ = [
    "DOCUMENT_SELECTOR",
    "DocumentFilter",
    "HandlerState",
    "Host",
    "InitializationHandler",
    "InitializeParams",
    "LaunchDescriptor",
    "Plugin",
    "PluginRpc",
    "stdio_plugin",
]
