"""
Async MEGA API client.

Only the anonymous part of the API is needed: resolving a public file
link and downloading its encrypted bytes.
"""
import asyncio
import json
import random
from typing import Any, Dict, Optional

import aiohttp

from .config import APIConfig
from .errors import MegaAPIError
from ..exceptions import RemoteFetchError
from ..logging import get_logger

logger = get_logger('api')

# Storage nodes stream in 128 KiB pieces, the size of the first MAC chunk
DOWNLOAD_CHUNK = 128 * 1024


class AsyncAPIClient:
    """
    Anonymous MEGA API session.

    Every command goes through :meth:`request`, which retries transport
    failures and the temporary MEGA codes listed in ``RetryConfig``.

    Example:
        >>> async with AsyncAPIClient(APIConfig.with_timeout(30)) as client:
        ...     node = await client.get_public_file('abc123')
        ...     blob = await client.download(node['g'])
    """

    def __init__(self, config: Optional[APIConfig] = None):
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._seq = random.randint(0, 0xFFFFFFFF)

    @property
    def config(self) -> APIConfig:
        return self._config

    async def __aenter__(self) -> 'AsyncAPIClient':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Open the aiohttp session lazily."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(**self._config.get_session_kwargs())
        return self._session

    async def close(self):
        session, self._session = self._session, None
        if session is not None and not session.closed:
            await session.close()

    def _next_url(self) -> str:
        self._seq += 1
        return f"{self._config.gateway}cs?id={self._seq}"

    async def request(self, data: Dict[str, Any]) -> Any:
        """
        Run one API command.

        Args:
            data: Command payload, e.g. ``{'a': 'g', 'p': handle}``

        Returns:
            The command's result (first element of the reply array)

        Raises:
            MegaAPIError: If MEGA answers with an error code
            RemoteFetchError: On transport failure, timeout or a reply that
                is not JSON
        """
        retry = self._config.retry
        attempt = 0
        while True:
            try:
                result = await self._post(data)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt >= retry.max_retries:
                    raise RemoteFetchError(f"MEGA API unreachable: {e!r}", cause=e) from e
                logger.warning(f"Network error talking to MEGA API ({e!r}), retrying")
            else:
                if not (isinstance(result, int) and result < 0):
                    return result
                if not retry.should_retry(result, attempt):
                    raise MegaAPIError(result)
                logger.warning(f"MEGA answered {result}, retry {attempt + 1}/{retry.max_retries}")

            await asyncio.sleep(retry.calculate_delay(attempt))
            attempt += 1

    async def _post(self, data: Dict[str, Any]) -> Any:
        session = await self._ensure_session()
        url = self._next_url()
        body = json.dumps([data])
        logger.debug(f"POST {url} {body}")

        async with session.post(url, data=body, proxy=self._config.proxy) as response:
            response.raise_for_status()
            text = await response.text()

        try:
            reply = json.loads(text)
        except ValueError:
            raise RemoteFetchError(f"Unexpected MEGA API response: {text[:200]!r}")

        # Batched replies are arrays; a bare integer is a request-level error
        if isinstance(reply, list) and reply:
            return reply[0]
        return reply

    async def get_public_file(self, handle: str) -> Dict[str, Any]:
        """
        Resolve a public file handle.

        Returns:
            Dict with ``g`` (download URL), ``s`` (size) and ``at``
            (encrypted attributes)
        """
        node = await self.request({'a': 'g', 'g': 1, 'ssl': 0, 'p': handle})
        if not isinstance(node, dict) or not node.get('g'):
            raise RemoteFetchError(f"Could not get download URL for {handle}")
        return node

    async def download(self, url: str) -> bytes:
        """Fetch the encrypted content from a storage node."""
        session = await self._ensure_session()
        buffer = bytearray()
        try:
            async with session.get(url, proxy=self._config.proxy) as response:
                response.raise_for_status()
                async for piece in response.content.iter_chunked(DOWNLOAD_CHUNK):
                    buffer.extend(piece)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RemoteFetchError(f"Download failed: {e!r}", cause=e) from e
        return bytes(buffer)
