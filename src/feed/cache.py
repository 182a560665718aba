"""Fetch-with-cache-fallback over flat JSON files.

The cache is a resilience buffer: fresh data is preferred when the network
is reachable and forced, cached data otherwise.  Each cache key maps to
exactly one file holding the last successfully fetched payload.
"""

from __future__ import annotations

import http.client
import logging
import urllib.request
from pathlib import Path

from topstories.errors import NetworkFailure
from topstories.shared.files import atomic_write_bytes, ensure_directory

logger = logging.getLogger(__name__)

USER_AGENT = "topstories/1.0"

# urllib.error.URLError and TimeoutError are both OSError subclasses.
_TRANSPORT_ERRORS = (OSError, http.client.HTTPException)


class FeedCache:
    """Resolve remote URLs to bytes, backed by one cache file per key."""

    def __init__(
        self,
        cache_dir: Path,
        *,
        force_refresh: bool = False,
        timeout: float = 30,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.force_refresh = force_refresh
        self.timeout = timeout
        ensure_directory(self.cache_dir)

    def path_for(self, key: str | int) -> Path:
        """Cache file for a key (a fixed name or a numeric id)."""
        return self.cache_dir / f"{key}.json"

    def resolve(self, url: str, cache_file: Path) -> bytes:
        """Return the payload for ``url``, using ``cache_file`` as short-circuit and fallback.

        Without ``force_refresh`` an existing cache file is returned with no
        network access.  Otherwise the URL is fetched and the body persisted;
        if the connection fails the cached payload (however old) is returned.

        Raises:
            NetworkFailure: The connection failed and nothing is cached, or the
                response body could not be read.
        """
        if not self.force_refresh:
            cached = self._read(cache_file)
            if cached is not None:
                logger.debug("Cache hit for %s", cache_file)
                return cached

        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            resp = urllib.request.urlopen(req, timeout=self.timeout)
        except _TRANSPORT_ERRORS as exc:
            cached = self._read(cache_file)
            if cached is not None:
                logger.warning("Fetch failed for %s (%s), using cached copy", url, exc)
                return cached
            raise NetworkFailure(f"Failed to fetch {url}: {exc}") from exc

        with resp:
            try:
                data = resp.read()
            except _TRANSPORT_ERRORS as exc:
                raise NetworkFailure(f"Failed to read response from {url}: {exc}") from exc

        self._write(cache_file, data)
        return data

    def _read(self, cache_file: Path) -> bytes | None:
        try:
            return cache_file.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Error reading cache file %s: %s", cache_file, exc)
            return None

    def _write(self, cache_file: Path, data: bytes) -> None:
        try:
            atomic_write_bytes(cache_file, data)
        except OSError as exc:
            logger.warning("Error writing cache file %s: %s", cache_file, exc)
