import datetime
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from .errors import UnsafeQueryValue
from .intents import Intent
from .params import (
    MarketCapParams,
    TOP_HOLDERS_LIMIT,
    TopBuyersParams,
    TopHoldersParams,
    TRENDING_LIMIT,
    TrendingParams,
)

SOL_ADDRESS = "So11111111111111111111111111111111111111112"

MAX_TERM_LENGTH = 128
MINT_ADDRESS_RE = re.compile(r"^[A-Za-z0-9]{32,44}$")
CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

MARKETCAP_QUERY = """
query ($term: String!, $count: Int!) {
  Solana {
    TokenSupplyUpdates(
      where: {TokenSupplyUpdate: {Currency: {MintAddress: {includes: $term}}}}
      orderBy: {descending: Block_Time, descendingByField: "TokenSupplyUpdate_Marketcap"}
      limitBy: {by: TokenSupplyUpdate_Currency_MintAddress, count: 1}
      limit: {count: $count}
    ) {
      TokenSupplyUpdate {
        Marketcap: PostBalanceInUSD
        Currency {
          Symbol
          MintAddress
        }
      }
    }
  }
}
"""

TOP_HOLDERS_QUERY = """
query ($token: String!) {
  Solana(dataset: realtime) {
    BalanceUpdates(
      limit: { count: %d }
      orderBy: { descendingByField: "BalanceUpdate_Holding_maximum" }
      where: {
        BalanceUpdate: {
          Currency: {
            MintAddress: { is: $token }
          }
        }
        Transaction: { Result: { Success: true } }
      }
    ) {
      BalanceUpdate {
        Account {
          Address
        }
        Holding: PostBalance(maximum: Block_Slot)
      }
    }
  }
}
""" % TOP_HOLDERS_LIMIT

TOP_BUYERS_QUERY = """
query ($token: String!, $limit: Int!) {
  Solana {
    DEXTrades(
      where: {
        Trade: {
          Buy: {
            Currency: {
              MintAddress: { is: $token }
            }
          }
        }
      }
      limit: { count: $limit }
      orderBy: { ascending: Block_Time }
    ) {
      Trade {
        Buy {
          Amount
          Account {
            Token {
              Owner
            }
          }
        }
      }
    }
  }
}
"""

TRENDING_QUERY = """
query ($quote: String!, $since: DateTime!, $recent: DateTime!) {
  Solana {
    DEXTradeByTokens(
      where: {
        Transaction: {Result: {Success: true}},
        Trade: {Side: {Currency: {MintAddress: {is: $quote}}}},
        Block: {Time: {since: $since}}
      }
      orderBy: {descendingByField: "total_trades"}
      limit: {count: %d}
    ) {
      Trade {
        Currency {
          Name
          MintAddress
          Symbol
        }
        start: PriceInUSD(minimum: Block_Time)
        min5: PriceInUSD(
          minimum: Block_Time,
          if: {Block: {Time: {after: $recent}}}
        )
        end: PriceInUSD(maximum: Block_Time)
        Side {
          Currency {
            Symbol
            Name
            MintAddress
          }
        }
      }
      total_trades: count
    }
  }
}
""" % TRENDING_LIMIT


@dataclass(frozen=True)
class QueryDocument:
    """
    A GraphQL query plus its variables.

    User-derived values only ever travel in `variables`; they are JSON-encoded
    when the document is serialized for the wire.
    """

    intent: Intent
    table: str
    query: str
    variables: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"query": self.query, "variables": dict(self.variables)}

    def serialize(self) -> str:
        return json.dumps(self.to_payload(), sort_keys=True)


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _iso(moment: datetime.datetime) -> str:
    return moment.astimezone(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def validate_mint_address(value: str) -> str:
    if not isinstance(value, str) or not MINT_ADDRESS_RE.match(value):
        raise UnsafeQueryValue("mintAddress", value)
    return value


def validate_term(value: str) -> str:
    if (
        not isinstance(value, str)
        or not value.strip()
        or len(value) > MAX_TERM_LENGTH
        or '"' in value
        or CONTROL_CHARS_RE.search(value)
    ):
        raise UnsafeQueryValue("term", value)
    return value


def validate_count(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise UnsafeQueryValue("count", value)
    return value


class QueryBuilder:
    """Turns an intent and its parameters into a Bitquery query document."""

    def __init__(self, clock: Callable[[], datetime.datetime] = _utc_now, trending_window_hours: float = 24.0):
        self.clock = clock
        self.trending_window_hours = trending_window_hours

    def build(self, intent: Intent, params) -> QueryDocument:
        if intent == Intent.MARKET_CAP and isinstance(params, MarketCapParams):
            return self.market_cap(params)
        if intent == Intent.TOP_HOLDERS and isinstance(params, TopHoldersParams):
            return self.top_holders(params)
        if intent == Intent.TOP_BUYERS and isinstance(params, TopBuyersParams):
            return self.top_buyers(params)
        if intent == Intent.TRENDING and isinstance(params, TrendingParams):
            return self.trending()
        raise ValueError(f"Cannot build a query for intent {intent.value} with {type(params).__name__}")

    def market_cap(self, params: MarketCapParams) -> QueryDocument:
        return QueryDocument(
            intent=Intent.MARKET_CAP,
            table="TokenSupplyUpdates",
            query=MARKETCAP_QUERY,
            variables={"term": validate_term(params.term), "count": validate_count(params.count)},
        )

    def top_holders(self, params: TopHoldersParams) -> QueryDocument:
        return QueryDocument(
            intent=Intent.TOP_HOLDERS,
            table="BalanceUpdates",
            query=TOP_HOLDERS_QUERY,
            variables={"token": validate_mint_address(params.mint_address)},
        )

    def top_buyers(self, params: TopBuyersParams) -> QueryDocument:
        return QueryDocument(
            intent=Intent.TOP_BUYERS,
            table="DEXTrades",
            query=TOP_BUYERS_QUERY,
            variables={"token": validate_mint_address(params.mint_address), "limit": validate_count(params.count)},
        )

    def trending(self) -> QueryDocument:
        now = self.clock()
        since = now - datetime.timedelta(hours=self.trending_window_hours)
        recent = now - datetime.timedelta(minutes=5)
        return QueryDocument(
            intent=Intent.TRENDING,
            table="DEXTradeByTokens",
            query=TRENDING_QUERY,
            variables={"quote": SOL_ADDRESS, "since": _iso(since), "recent": _iso(recent)},
        )
