"""Download, caching and extraction of the managed backend."""

from .agent import agent_argument, provision_agent
from .archive import ExtractResult, extract_tar_gz
from .cache import ArtifactCache, ArtifactLocation
from .download import Downloader

__all__ = [
    "ArtifactCache",
    "ArtifactLocation",
    "Downloader",
    "ExtractResult",
    "agent_argument",
    "extract_tar_gz",
    "provision_agent",
]
