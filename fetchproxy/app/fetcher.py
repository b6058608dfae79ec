import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .errors import FetchNetworkError, FetchTimeoutError, PayloadTooLargeError

logger = logging.getLogger(__name__)

ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE = "en-US,en;q=0.9"


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    text: str = ""
    size: int = 0
    final_url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def build_client() -> httpx.AsyncClient:
    # Timeouts are enforced per call by FetchExecutor.
    return httpx.AsyncClient(follow_redirects=True, timeout=None)


class FetchExecutor:
    """
    Outbound GET with a hard wall-clock timeout.

    Non-2xx answers come back as an UpstreamResponse with an empty body; only
    timeouts and transport failures raise. By default the whole body is read
    before anyone looks at its size. With ``stream_size_cap`` the body is counted
    while it streams and the transfer is aborted once it passes ``max_size_bytes``.
    """
    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str,
        max_size_bytes: int,
        stream_size_cap: bool = False,
    ):
        self.client = client
        self.max_size_bytes = max_size_bytes
        self.stream_size_cap = stream_size_cap
        self.headers = {
            "User-Agent": user_agent,
            "Accept": ACCEPT,
            "Accept-Language": ACCEPT_LANGUAGE,
            "Cache-Control": "no-cache",
        }

    async def fetch(self, url: str, timeout_ms: int) -> UpstreamResponse:
        try:
            return await asyncio.wait_for(self._get(url), timeout=timeout_ms / 1000.0)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("Upstream timed out after %sms: %s", timeout_ms, url)
            raise FetchTimeoutError(timeout_ms)
        except httpx.HTTPError as e:
            logger.warning("Upstream network error for %s: %s", url, e)
            raise FetchNetworkError(str(e) or type(e).__name__)

    async def _get(self, url: str) -> UpstreamResponse:
        async with self.client.stream("GET", url, headers=self.headers, follow_redirects=True) as r:
            final_url = str(r.url)
            if not r.is_success:
                return UpstreamResponse(status_code=r.status_code, final_url=final_url)

            if self.stream_size_cap:
                raw = await self._read_capped(r)
            else:
                raw = await r.aread()

            text = raw.decode(r.encoding or "utf-8", errors="replace")
            return UpstreamResponse(
                status_code=r.status_code,
                text=text,
                size=len(text.encode("utf-8")),
                final_url=final_url,
            )

    async def _read_capped(self, r: httpx.Response) -> bytes:
        chunks = []
        read = 0
        async for chunk in r.aiter_bytes():
            read += len(chunk)
            if read > self.max_size_bytes:
                logger.warning("Aborting %s after %s bytes (limit %s)", r.url, read, self.max_size_bytes)
                raise PayloadTooLargeError(read, self.max_size_bytes)
            chunks.append(chunk)
        return b"".join(chunks)
