import datetime
import json

import pytest

from draco.queries import QueryBuilder

FIXED_NOW = datetime.datetime(2024, 8, 15, 5, 19, tzinfo=datetime.timezone.utc)

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
PUMP_MINT = "98mb39tPFKQJ4Bif8iVg9mYb9wsfPZgpgN1sxoVTpump"


class FakeResponse:
    def __init__(self, status=200, body="", reason="OK"):
        self.status = status
        self.reason = reason
        self.body = body

    async def text(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; records every POST."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


class FakeRegistry:
    def __init__(self, exists=True, data=None):
        self.exists = exists
        self.data = data
        self.checked = []

    def agent_exists(self, agent_name):
        self.checked.append(agent_name)
        return self.exists

    def get_agent_data(self, agent_name):
        return self.data

    async def close(self):
        pass


class FakeAnalytics:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.docs = []

    async def execute(self, doc):
        self.docs.append(doc)
        if self.error:
            raise self.error
        return self.rows

    async def close(self):
        pass


def bitquery_body(table, rows):
    return json.dumps({"data": {"Solana": {table: rows}}})


@pytest.fixture
def builder():
    return QueryBuilder(clock=lambda: FIXED_NOW)
