"""Client for refreshing the mapping document from GitHub."""

import os
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

logger = structlog.get_logger()


@dataclass
class FetchResult:
    """Outcome of a remote config fetch."""

    ok: bool
    output: str = ""


class RemoteConfigFetcher:
    """Downloads the raw mapping document from a GitHub contents URL."""

    def __init__(
        self,
        url: str,
        token: str,
        timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize fetcher.

        Args:
            url: GitHub contents API (or raw) URL of the mapping document
            token: GitHub token with read access to the repository
            timeout: Request timeout in seconds
            transport: httpx transport override
        """
        self.url = url
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self):
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3.raw",
        }

    async def fetch(self, dest: str) -> FetchResult:
        """Fetch the document and write it to ``dest``.

        Args:
            dest: Local path of the mapping document

        Returns:
            FetchResult with ok=False on any HTTP or write error
        """
        logger.info("remote_config.fetching", url=self.url, dest=dest)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(self.url, headers=self._get_headers())
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "remote_config.fetch_failed",
                url=self.url,
                status_code=e.response.status_code,
            )
            return FetchResult(ok=False, output=e.response.text)
        except httpx.HTTPError as e:
            logger.error("remote_config.fetch_failed", url=self.url, error=str(e))
            return FetchResult(ok=False, output=str(e))

        try:
            directory = os.path.dirname(dest)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(dest, "wb") as f:
                f.write(response.content)
        except OSError as e:
            logger.error("remote_config.write_failed", dest=dest, error=str(e))
            return FetchResult(ok=False, output=str(e))

        logger.info("remote_config.fetched", url=self.url, size_bytes=len(response.content))
        return FetchResult(ok=True, output=f"Wrote {len(response.content)} bytes to {dest}")
