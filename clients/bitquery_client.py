import asyncio
import json
from typing import Any, Dict, List

import aiohttp
from loguru import logger

from decorators import monitor_execution
from draco.config import BitqueryConfig
from draco.errors import AnalyticsQueryError, TransportError
from draco.queries import QueryDocument

from .base_client import BaseAPIClient


class BitqueryClient(BaseAPIClient):
    """Sends query documents to the Bitquery GraphQL endpoint"""

    def __init__(self, config: BitqueryConfig):
        super().__init__(base_url=config.api_url, timeout=config.timeout)
        self.api_key = config.api_key

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "X-API-KEY": self.api_key}

    @monitor_execution("BitqueryClient.execute")
    async def execute(self, doc: QueryDocument) -> List[Dict[str, Any]]:
        """
        Run a query and return the rows under `data.Solana.<table>`.

        A body that is not JSON, or that lacks the expected path, yields an empty
        list. Non-2xx statuses, network failures and GraphQL errors raise
        TransportError. There is no retry.
        """
        session = self._get_async_session()
        logger.debug(f"Bitquery request | Table: {doc.table} | Variables: {doc.variables}")

        try:
            async with session.post(
                self.base_url, data=doc.serialize(), headers=self.headers, timeout=self._client_timeout()
            ) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(response.reason or f"HTTP {response.status}", status=response.status)
                status = response.status
                body = await response.text()
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error when calling Bitquery: {str(e)}")
        except asyncio.TimeoutError:
            raise TransportError(f"Bitquery request timed out after {self.timeout}s")

        return self._extract_rows(doc, body, status)

    def _extract_rows(self, doc: QueryDocument, body: str, status: int) -> List[Dict[str, Any]]:
        try:
            data = json.loads(body) if body else None
        except ValueError:
            logger.warning(f"Malformed Bitquery response | Table: {doc.table}")
            return []

        if not isinstance(data, dict):
            return []

        if data.get("errors"):
            messages = [
                error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
                for error in data["errors"]
            ]
            raise AnalyticsQueryError(messages, status=status)

        solana = data.get("data") or {}
        rows = solana.get("Solana") if isinstance(solana, dict) else None
        rows = rows.get(doc.table) if isinstance(rows, dict) else None
        if not isinstance(rows, list):
            return []

        logger.info(f"Bitquery response | Table: {doc.table} | Rows: {len(rows)}")
        return rows
