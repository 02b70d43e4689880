"""HTTP transport abstraction to make the shard cache testable and pluggable.

Provides a simple async interface with a `get` method returning a
Response-like object (``status_code`` and ``content``). The default
implementation uses curl-cffi's async session, impersonating Chrome's TLS
fingerprint. ``FileTransport`` serves a local static directory with the same
interface so a freshly built ``data/`` tree can be browsed without a server.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

from curl_cffi import requests as curl_requests


# Shards are immutable between builds only; always go to the origin.
NO_CACHE_HEADERS = {
    'cache-control': 'no-cache',
    'pragma': 'no-cache',
}


class HTTPTransport:
    """Abstract transport interface. Concrete transports implement `get`."""

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 30.0):
        raise NotImplementedError()

    async def close(self) -> None:
        return None


class CurlTransport(HTTPTransport):
    """curl-cffi async transport; one session per listing session."""

    def __init__(self, impersonate: str = "chrome", verify: bool = True):
        self._impersonate = impersonate
        self._verify = verify
        self._session = None

    def _filter_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Remove headers that conflict with impersonation (curl-cffi sets these automatically)."""
        skip_keys = {'user-agent', 'accept-encoding', 'accept-language'}
        return {k: v for k, v in headers.items() if k.lower() not in skip_keys}

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 30.0):
        if self._session is None:
            self._session = curl_requests.AsyncSession()
        return await self._session.get(
            url,
            headers=self._filter_headers(headers or {}),
            impersonate=self._impersonate,
            verify=self._verify,
            timeout=timeout,
            allow_redirects=True,
        )

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None


@dataclass
class FileResponse:
    """Minimal Response-like object for files read from disk"""
    url: str
    status_code: int
    content: bytes = b""


class FileTransport(HTTPTransport):
    """Serves ``file:`` URLs or plain filesystem paths."""

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 30.0):
        raw_path = urlparse(url).path if url.startswith('file:') else url
        path = Path(unquote(raw_path))
        if not path.is_file():
            return FileResponse(url=url, status_code=404)
        content = await asyncio.to_thread(path.read_bytes)
        return FileResponse(url=url, status_code=200, content=content)


def is_remote(base_url: str) -> bool:
    return base_url.startswith(('http://', 'https://'))


def transport_for(base_url: str) -> HTTPTransport:
    """Pick curl-cffi for http(s) bases and the filesystem otherwise."""
    return CurlTransport() if is_remote(base_url) else FileTransport()


__all__ = [
    "CurlTransport",
    "FileResponse",
    "FileTransport",
    "HTTPTransport",
    "NO_CACHE_HEADERS",
    "transport_for",
]
