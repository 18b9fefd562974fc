"""Remote store reading published archives over HTTP(S).

Objects are addressed as ``{base_url}/{key}``.  Every request carries the
configured timeout so one unreachable object cannot stall a batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from urllib.parse import quote

import httpx

from distsum.core.errors import RemoteUnavailable
from distsum.core.hasher import CHUNK_SIZE

logger = logging.getLogger(__name__)


class HttpObjectStore:
    """Read-only :class:`~distsum.storage.RemoteStore` backed by httpx.

    Parameters
    ----------
    base_url:
        URL under which the ``dist/`` tree is published.
    timeout:
        Per-request timeout in seconds.
    client:
        Optional pre-built ``httpx.Client`` (tests pass one with a
        ``MockTransport``).  A client created here is closed by
        :meth:`close`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._timeout = timeout

    def url_for(self, key: str) -> str:
        return f"{self._base_url}/{quote(key.lstrip('/'), safe='/')}"

    def exists(self, key: str) -> bool:
        url = self.url_for(key)
        try:
            response = self._client.head(url, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise RemoteUnavailable(f"HEAD {url} failed: {exc}") from exc
        if response.status_code == 404:
            return False
        if response.is_success:
            return True
        raise RemoteUnavailable(f"HEAD {url} returned {response.status_code}")

    def open(self, key: str) -> Iterator[bytes]:
        url = self.url_for(key)
        try:
            with self._client.stream("GET", url, timeout=self._timeout) as response:
                if response.status_code == 404:
                    raise RemoteUnavailable(f"GET {url}: not found")
                response.raise_for_status()
                for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                    yield chunk
        except httpx.HTTPError as exc:
            raise RemoteUnavailable(f"GET {url} failed: {exc}") from exc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpObjectStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HttpObjectStore(base_url={self._base_url!r})"
