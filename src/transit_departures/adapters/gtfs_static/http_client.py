"""HTTP download of binary feed payloads (static zip, realtime protobuf)."""

import logging
from typing import TYPE_CHECKING

import aiohttp

from transit_departures.adapters.api_request_logger import log_api_request
from transit_departures.domain.errors import FeedFetchError

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientSession


class FeedHttpClient:
    """Downloads feed payloads through a shared aiohttp session."""

    def __init__(self, session: "ClientSession", timeout_seconds: float | None = None) -> None:
        """Initialize with the application's aiohttp session.

        Args:
            session: Shared client session.
            timeout_seconds: Total per-request timeout; None keeps the session default.
        """
        self._session = session
        self._timeout = (
            aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds is not None else None
        )

    async def download(self, url: str) -> bytes:
        """Download a payload.

        Raises:
            FeedFetchError: On a network failure, a timeout or a non-2xx status.
        """
        log_api_request("Feed download", url)
        try:
            async with self._session.get(url, timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    body = await response.text(errors="replace")
                    logger.error(
                        f"Feed download returned status {response.status} for {url}: {body[:200]}"
                    )
                    raise FeedFetchError(url, f"HTTP {response.status}", response.status)
                return await response.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Feed download failed for {url}: {e}")
            raise FeedFetchError(url, str(e) or type(e).__name__) from e
