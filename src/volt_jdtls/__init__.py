"""volt-jdtls - Eclipse JDT language server bootstrap for volt plugin hosts.

Resolves the host's initialization options, provisions the jdtls snapshot
(and optionally the lombok agent) into the plugin directory, and asks the
host to start the language server.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy import of the public entry points."""
    if name in ("InitializationHandler", "LaunchDescriptor", "Plugin", "PluginRpc"):
        from . import plugin
        return getattr(plugin, name)
    if name in ("ExplicitServer", "ManagedServer", "resolve"):
        from . import core
        return getattr(core, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "InitializationHandler",
    "LaunchDescriptor",
    "Plugin",
    "PluginRpc",
    "ExplicitServer",
    "ManagedServer",
    "resolve",
]
