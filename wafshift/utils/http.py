"""Async HTTP client — one pooled session for fingerprinting a target."""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import aiohttp

if TYPE_CHECKING:
    from wafshift.config import HttpSettings

logger = logging.getLogger(__name__)


class AsyncHttpClient:
    """Shared async HTTP client with connection pooling.

    Usage:
        async with AsyncHttpClient() as http:
            resp = await http.get("https://example.com")
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_connections: int = 20,
        user_agent: str = "wafshift/1.0",
        verify_ssl: bool = False,
        follow_redirects: bool = True,
        max_redirects: int = 5,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_connections = max_connections
        self.user_agent = user_agent
        self.verify_ssl = verify_ssl
        self.follow_redirects = follow_redirects
        self.max_redirects = max_redirects
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> AsyncHttpClient:
        return cls(
            timeout=settings.timeout,
            user_agent=settings.user_agent,
            verify_ssl=settings.verify_ssl,
            follow_redirects=settings.follow_redirects,
            max_redirects=settings.max_redirects,
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            ssl_ctx = None
            if not self.verify_ssl:
                ssl_ctx = ssl.create_default_context()
                ssl_ctx.check_hostname = False
                ssl_ctx.verify_mode = ssl.CERT_NONE
            # The connector binds to the running loop, so it is built lazily
            connector = aiohttp.TCPConnector(limit=self.max_connections, ssl=ssl_ctx)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._session

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> aiohttp.ClientResponse:
        session = await self._ensure_session()
        kw: dict[str, Any] = {
            "allow_redirects": self.follow_redirects,
            "max_redirects": self.max_redirects,
            **kwargs,
        }
        if headers:
            kw["headers"] = headers
        if timeout:
            kw["timeout"] = aiohttp.ClientTimeout(total=timeout)
        return await session.get(url, **kw)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()


def with_query_param(url: str, name: str, value: str) -> str:
    """Append ``name=value`` to ``url``, quoting the value.

    Uses ``&`` when the URL already carries a query string.
    """
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{name}={quote(value, safe='')}"
