"""
JSONBin Client
==============
Async client for the JSONBin v3 API used as the shared remote document.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import aiohttp

from ..core.constants import DEFAULT_REQUEST_TIMEOUT_SECONDS, JSONBIN_BASE_URL
from ..core.exceptions import CloudConnectionFailed, CloudSyncFailed
from .schema import RemoteConfig

logger = logging.getLogger(__name__)


class JsonBinClient:
    """
    Async client for one-document fetch/replace against JSONBin.

    The session is created lazily so the client can be built off-loop and
    used from the event loop thread.
    """

    def __init__(self, base_url: str = JSONBIN_BASE_URL, *, timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self.session

    async def close(self):
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch_latest(self, config: RemoteConfig) -> Optional[Any]:
        """
        Fetch the latest version of the bin.

        Args:
            config: bin id and master key

        Returns:
            The `record` field of the response (None if missing)

        Raises:
            CloudConnectionFailed: bad key (401), unknown bin (404), any other
                non-2xx status, timeout or connection error
        """
        url = f"{self.base_url}/{config.bin_id}/latest"
        try:
            session = await self._get_session()
            async with session.get(
                url,
                headers={"X-Master-Key": config.api_key},
                # cache buster
                params={"t": str(int(time.time() * 1000))},
            ) as response:
                if response.status == 401:
                    raise CloudConnectionFailed("Invalid API key (Unauthorized)", status=401)
                if response.status == 404:
                    raise CloudConnectionFailed("Bin ID not found", status=404)
                if response.status >= 400:
                    raise CloudConnectionFailed(
                        f"Connection failed: {response.status} {response.reason}",
                        status=response.status,
                    )
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise CloudConnectionFailed(
                        f"Unexpected response from the bin service: {e}",
                        status=response.status,
                    )

        except asyncio.TimeoutError:
            logger.error(f"Fetch of bin {config.bin_id} timed out")
            raise CloudConnectionFailed("Request timed out")
        except aiohttp.ClientError as e:
            logger.error(f"Connection error fetching bin {config.bin_id}: {e}")
            raise CloudConnectionFailed(f"Connection failed: {e}")

        if not isinstance(data, dict):
            return None
        return data.get("record")

    async def replace(self, config: RemoteConfig, payload: dict) -> Any:
        """
        Overwrite the bin with a full snapshot.

        Raises:
            CloudSyncFailed: non-2xx status, timeout or connection error
        """
        url = f"{self.base_url}/{config.bin_id}"
        try:
            session = await self._get_session()
            async with session.put(
                url,
                json=payload,
                headers={"X-Master-Key": config.api_key},
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    logger.error(f"Push to bin {config.bin_id} failed: {response.status} - {error_text}")
                    raise CloudSyncFailed(
                        f"Sync failed: {response.status} {response.reason}",
                        status=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise CloudSyncFailed(
                        f"Unexpected response from the bin service: {e}",
                        status=response.status,
                    )

        except asyncio.TimeoutError:
            logger.error(f"Push to bin {config.bin_id} timed out")
            raise CloudSyncFailed("Request timed out")
        except aiohttp.ClientError as e:
            logger.error(f"Connection error pushing bin {config.bin_id}: {e}")
            raise CloudSyncFailed(f"Sync failed: {e}")
