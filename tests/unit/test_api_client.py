"""Tests for the async MEGA API client."""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from wabot.core.api import APIConfig, AsyncAPIClient, MegaAPIError, RetryConfig
from wabot.core.exceptions import RemoteFetchError


def mock_response(text=None, chunks=None, error=None):
    """Build an async context manager yielding a fake aiohttp response."""
    response = MagicMock()
    response.raise_for_status = MagicMock(side_effect=error)
    response.text = AsyncMock(return_value=text)
    
    async def iter_chunked(size):
        for chunk in chunks or []:
            yield chunk
    
    response.content.iter_chunked = iter_chunked
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=response)
    ctx.__aexit__ = AsyncMock(return_value=None)
    return ctx


def client_with(session, retries=2):
    config = APIConfig(retry=RetryConfig(max_retries=retries, base_delay=0.0))
    client = AsyncAPIClient(config)
    client._ensure_session = AsyncMock(return_value=session)
    return client


@pytest.fixture
def no_sleep():
    with patch('wabot.core.api.client.asyncio.sleep', new=AsyncMock()) as sleep:
        yield sleep


class TestAsyncAPIClientRequest:
    """Test suite for AsyncAPIClient.request."""
    
    @pytest.mark.asyncio
    async def test_get_public_file(self):
        """Test a public file lookup returns the first result."""
        session = MagicMock()
        session.post = MagicMock(return_value=mock_response('[{"g": "https://dl", "s": 10}]'))
        client = client_with(session)
        
        result = await client.get_public_file("abc123")
        
        assert result == {"g": "https://dl", "s": 10}
        body = session.post.call_args.kwargs['data']
        assert '"p": "abc123"' in body
        assert '"a": "g"' in body
    
    @pytest.mark.asyncio
    async def test_negative_code_raises(self):
        """Test ENOENT is surfaced as MegaAPIError."""
        session = MagicMock()
        session.post = MagicMock(return_value=mock_response('[-9]'))
        client = client_with(session)
        
        with pytest.raises(MegaAPIError) as exc_info:
            await client.get_public_file("gone")
        
        assert exc_info.value.code == -9
        assert isinstance(exc_info.value, RemoteFetchError)
        assert 'ENOENT' in str(exc_info.value)
    
    @pytest.mark.asyncio
    async def test_eagain_is_retried(self, no_sleep):
        """Test EAGAIN is retried and then succeeds."""
        session = MagicMock()
        session.post = MagicMock(side_effect=[
            mock_response('[-3]'),
            mock_response('[{"g": "https://dl"}]'),
        ])
        client = client_with(session)
        
        result = await client.request({'a': 'g', 'p': 'x'})
        
        assert result == {"g": "https://dl"}
        assert session.post.call_count == 2
        no_sleep.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_retries_are_bounded(self, no_sleep):
        """Test retries stop after max_retries."""
        session = MagicMock()
        session.post = MagicMock(side_effect=lambda *a, **k: mock_response('[-3]'))
        client = client_with(session, retries=2)
        
        with pytest.raises(MegaAPIError):
            await client.request({'a': 'g', 'p': 'x'})
        
        assert session.post.call_count == 3
    
    @pytest.mark.asyncio
    async def test_network_error_wrapped(self, no_sleep):
        """Test transport failures become RemoteFetchError with cause."""
        error = aiohttp.ClientConnectionError("refused")
        session = MagicMock()
        session.post = MagicMock(side_effect=error)
        client = client_with(session, retries=1)
        
        with pytest.raises(RemoteFetchError) as exc_info:
            await client.request({'a': 'g', 'p': 'x'})
        
        assert exc_info.value.cause is error
    
    @pytest.mark.asyncio
    async def test_timeout_wrapped(self, no_sleep):
        """Test timeouts become RemoteFetchError."""
        session = MagicMock()
        session.post = MagicMock(side_effect=asyncio.TimeoutError())
        client = client_with(session, retries=0)
        
        with pytest.raises(RemoteFetchError):
            await client.request({'a': 'g', 'p': 'x'})
    
    @pytest.mark.asyncio
    async def test_garbage_response(self):
        """Test non-JSON responses raise RemoteFetchError."""
        session = MagicMock()
        session.post = MagicMock(return_value=mock_response('<html>'))
        client = client_with(session)
        
        with pytest.raises(RemoteFetchError, match="Unexpected"):
            await client.request({'a': 'g'})
    
    @pytest.mark.asyncio
    async def test_missing_download_url(self):
        """Test a result without ``g`` is an error."""
        session = MagicMock()
        session.post = MagicMock(return_value=mock_response('[{"s": 10}]'))
        client = client_with(session)
        
        with pytest.raises(RemoteFetchError, match="download URL"):
            await client.get_public_file("abc123")


class TestAsyncAPIClientDownload:
    """Test suite for AsyncAPIClient.download."""
    
    @pytest.mark.asyncio
    async def test_download_joins_chunks(self):
        """Test streamed chunks are concatenated."""
        session = MagicMock()
        session.get = MagicMock(return_value=mock_response(chunks=[b"ab", b"cd"]))
        client = client_with(session)
        
        assert await client.download("https://dl") == b"abcd"
    
    @pytest.mark.asyncio
    async def test_download_http_error(self):
        """Test HTTP errors become RemoteFetchError."""
        error = aiohttp.ClientResponseError(MagicMock(), (), status=509)
        session = MagicMock()
        session.get = MagicMock(return_value=mock_response(error=error))
        client = client_with(session)
        
        with pytest.raises(RemoteFetchError) as exc_info:
            await client.download("https://dl")
        
        assert exc_info.value.cause is error


class TestAPIConfig:
    """Test suite for API configuration."""
    
    def test_with_timeout_bounds_all(self):
        """Test a short total timeout caps connect and read timeouts."""
        config = APIConfig.with_timeout(5.0)
        
        assert config.timeout.total == 5.0
        assert config.timeout.connect == 5.0
        assert config.timeout.sock_read == 5.0
    
    def test_session_kwargs(self):
        """Test session kwargs carry the timeout and user agent."""
        kwargs = APIConfig.with_timeout(12.0).get_session_kwargs()
        
        assert kwargs['timeout'].total == 12.0
        assert kwargs['headers']['User-Agent'].startswith('wabot/')
    
    def test_retry_delay_capped(self):
        """Test exponential delay stops at max_delay."""
        retry = RetryConfig(base_delay=1.0, max_delay=5.0)
        
        assert retry.calculate_delay(0) == 1.0
        assert retry.calculate_delay(2) == 4.0
        assert retry.calculate_delay(10) == 5.0
