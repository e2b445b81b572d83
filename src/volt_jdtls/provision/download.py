"""Blocking HTTP downloads of provisioning artifacts."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import httpx

from .. import __version__
from ..core.errors import DownloadError
from ..util.log import Log

log = Log.create({"service": "provision.download"})

USER_AGENT = f"volt-jdtls/{__version__}"
CHUNK_SIZE = 64 * 1024


class Downloader:
    """Fetches a URL into a local file.

    The body is streamed into ``<target>.part`` and renamed into place once
    complete, so an existing target is always a full body.
    """

    def __init__(
        self,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(
            transport=transport,
            timeout=None,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def fetch(self, url: str, target: Path) -> Path:
        """Download ``url`` to ``target``, raising :class:`DownloadError`."""
        partial = target.with_name(target.name + ".part")
        with log.time("download", {"url": url, "target": str(target)}):
            try:
                with self._client.stream("GET", url) as response:
                    if not response.is_success:
                        raise DownloadError(url, f"HTTP {response.status_code}", response.status_code)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with open(partial, "wb") as out:
                        for chunk in response.iter_bytes(CHUNK_SIZE):
                            out.write(chunk)
            except httpx.HTTPError as e:
                partial.unlink(missing_ok=True)
                raise DownloadError(url, str(e) or type(e).__name__) from e
            except OSError as e:
                partial.unlink(missing_ok=True)
                raise DownloadError(url, f"cannot write {target.name}: {e}") from e
            try:
                os.replace(partial, target)
            except OSError as e:
                partial.unlink(missing_ok=True)
                raise DownloadError(url, f"cannot move {partial.name} into place: {e}") from e
        return target
