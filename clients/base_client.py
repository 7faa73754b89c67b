from typing import Any, Optional

import aiohttp
import requests
from loguru import logger
from requests.exceptions import RequestException


class BaseAPIClient:
    def __init__(self, base_url: str, timeout: Optional[float] = 30):
        self.base_url = base_url
        self.timeout = timeout
        self.session = requests.Session()
        self.async_session: Optional[aiohttp.ClientSession] = None

    def _sync_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Simple synchronous request"""
        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout

        try:
            response = self.session.request(method, f"{self.base_url}{endpoint}", **kwargs)
            response.raise_for_status()
            return response.json()
        except RequestException as e:
            logger.error(f"API request failed: {e}")
            raise

    def _get_async_session(self) -> aiohttp.ClientSession:
        if not self.async_session:
            self.async_session = aiohttp.ClientSession()
        return self.async_session

    def _client_timeout(self) -> Optional[aiohttp.ClientTimeout]:
        if self.timeout is None:
            return None
        return aiohttp.ClientTimeout(total=self.timeout)

    async def close(self):
        if self.async_session:
            await self.async_session.close()
            self.async_session = None
        self.session.close()
