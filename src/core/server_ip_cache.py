import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

PENDING_IP = "fetching..."
UNKNOWN_IP = "unknown"


class ServerIPCache:
    """
    Read-mostly cache of this server's public IP address.

    The address is looked up once in a background task when the service starts.
    Until the lookup finishes, ``get`` returns the "fetching..." sentinel; if it
    fails, "unknown" is served for the rest of the process lifetime.
    """

    def __init__(
        self,
        lookup_url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the ServerIPCache.

        Args:
            lookup_url (str): Service that answers with the caller's public IP as plain text.
            timeout (float): Timeout in seconds for the lookup request.
            transport (Optional[httpx.AsyncBaseTransport]): Transport override, used in tests.
        """
        self.lookup_url = lookup_url
        self.timeout = timeout
        self.transport = transport
        self._ip: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    def get(self) -> str:
        """
        Return the cached IP, or the pending sentinel if the lookup has not finished.
        """
        return self._ip or PENDING_IP

    async def start(self):
        """
        Start the lookup as an asynchronous task so startup is not blocked.
        """
        self._task = asyncio.create_task(self.refresh())
        logger.info("Server IP lookup started.")

    async def stop(self):
        """
        Cancel the lookup if it is still running.
        """
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Server IP lookup stopped.")

    async def refresh(self) -> str:
        """
        Look up the public IP and store it in the cache.

        Returns:
            str: The resolved IP, or "unknown" if the lookup failed.
        """
        self._ip = await self._fetch()
        logger.info(f"Server IP: {self._ip}")
        return self._ip

    async def _fetch(self) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.get(self.lookup_url)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error getting server IP: {e!r}")
            return UNKNOWN_IP
        return resp.text.strip() or UNKNOWN_IP
