"""Async HTTP transport for GraphQL calls with connection pooling."""
import aiohttp
import asyncio
import time
from typing import Any, Dict, Optional, Tuple
from gql_pager.errors import TransportError
from gql_pager.logging_utils import log
MAX_CONCURRENT_REQUESTS = 10
MAX_RATE_LIMIT_WAIT = 60
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RETRIES = 3


class AsyncTransport:
    """Issues single HTTP calls; retries and rate-limit waits live here.

    One transport may be shared by several independent fetches. Each fetch
    keeps at most one call outstanding, the semaphore bounds them together.
    """
    def __init__(self, timeout: float = DEFAULT_TIMEOUT, max_retries: int = DEFAULT_MAX_RETRIES):
        self.timeout = timeout
        self.max_retries = max_retries
        self.session: Optional[aiohttp.ClientSession] = None
        self.semaphore = asyncio.Semaphore(MAX_CONCURRENT_REQUESTS)
        self.remaining_quota: Optional[int] = None
        self.reset_time: Optional[int] = None
        self.request_count = 0

    @staticmethod
    def _safe_int(value, default=None):
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _update_rate_signals(self, headers):
        self.remaining_quota = self._safe_int(headers.get("X-RateLimit-Remaining"), self.remaining_quota)
        self.reset_time = self._safe_int(headers.get("X-RateLimit-Reset"), self.reset_time)

    def _rate_limit_wait(self) -> int:
        if not self.reset_time:
            return 1
        return max(1, self.reset_time - int(time.time()))

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(limit=MAX_CONCURRENT_REQUESTS, limit_per_host=5)
        self.session = aiohttp.ClientSession(connector=connector)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    async def issue(self, url: str, method: str, headers: Dict[str, str], body: Any) -> Tuple[int, str]:
        """Execute one HTTP call and return (status, raw body text)."""
        if not self.session:
            raise TransportError("Session not initialized. Use 'async with' context manager.")
        async with self.semaphore:
            for attempt in range(self.max_retries):
                last_attempt = attempt == self.max_retries - 1
                try:
                    async with self.session.request(
                        method, url, headers=headers, json=body,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as resp:
                        self._update_rate_signals(resp.headers)
                        if resp.status in (403, 429) and self.remaining_quota == 0:
                            wait_time = self._rate_limit_wait()
                            if wait_time <= MAX_RATE_LIMIT_WAIT and not last_attempt:
                                log(f"Rate limit reached, waiting {wait_time}s")
                                await asyncio.sleep(wait_time + 1)
                                continue
                            raise TransportError("Rate limit exceeded. Please try again later.", resp.status)
                        if resp.status >= 500 and not last_attempt:
                            log(f"Server error {resp.status}, retry {attempt + 1}/{self.max_retries}")
                            await asyncio.sleep(2 ** attempt)
                            continue
                        text = await resp.text()
                        self.request_count += 1
                        return resp.status, text
                except asyncio.TimeoutError:
                    if not last_attempt:
                        await asyncio.sleep(1)
                        continue
                    raise TransportError("Request timeout")
                except aiohttp.ClientError as e:
                    if not last_attempt:
                        await asyncio.sleep(1)
                        continue
                    raise TransportError(f"Connection error: {str(e)}")
            raise TransportError("Max retries exceeded")

    def quota_info(self) -> str:
        if self.remaining_quota is not None:
            return f"API quota remaining: {self.remaining_quota}"
        return "API quota information unavailable"
