# core/bridge/transport.py
"""
HTTP transport for the bridge: one POST, bounded redirects, fixed timeout
"""

import asyncio
import logging

import aiohttp

from core.config_manager import BridgeConfig
from core.bridge.models import RawResponse

logger = logging.getLogger(__name__)


class TransportFailure(Exception):
    """The exchange with the endpoint did not produce a response"""

    def __init__(self, url: str, cause: str):
        super().__init__(f"{url}: {cause}")
        self.url = url
        self.cause = cause


class TransportClient:
    """Sends encoded payloads to the configured endpoint"""

    def __init__(self, config: BridgeConfig):
        self.config = config

    def _headers(self) -> dict:
        return {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': self.config.user_agent,
        }

    async def post(self, body: bytes) -> RawResponse:
        """
        POST the body to the endpoint exactly once

        Args:
            body: Encoded JSON payload

        Returns:
            RawResponse: Status code and raw body bytes

        Raises:
            TransportFailure: Connection, TLS, redirect limit or timeout errors
        """
        url = self.config.endpoint_url

        try:
            # Новая сессия на каждый вызов: вызовы не делят соединения
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            ) as session:
                async with session.post(
                    url,
                    data=body,
                    headers=self._headers(),
                    allow_redirects=True,
                    # aiohttp raises on the redirect that reaches max_redirects
                    max_redirects=self.config.max_redirects + 1,
                ) as response:
                    content = await response.read()
                    logger.debug(
                        f"Endpoint response: HTTP {response.status}, {len(content)} bytes"
                    )
                    return RawResponse(status=response.status, body=content)

        except aiohttp.TooManyRedirects as e:
            cause = f"more than {self.config.max_redirects} redirects ({e})"
            logger.error(f"❌ Redirect limit exceeded: {url}")
            raise TransportFailure(url, cause) from e

        except aiohttp.ClientConnectorError as e:
            logger.error(f"❌ Cannot connect to endpoint {url}: {e}")
            raise TransportFailure(url, f"cannot connect: {e}") from e

        except asyncio.TimeoutError as e:
            cause = f"no response within {self.config.timeout:g} seconds"
            logger.error(f"❌ Endpoint timed out: {url}")
            raise TransportFailure(url, cause) from e

        except aiohttp.ClientError as e:
            logger.error(f"❌ Request error for {url}: {e}")
            raise TransportFailure(url, f"request error: {e}") from e
