from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List

from .intents import Intent
from .params import MarketCapParams, TOP_HOLDERS_LIMIT, TopBuyersParams, TopHoldersParams, TRENDING_LIMIT


def _round_half_up(value: Decimal) -> str:
    return str(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_marketcap(value) -> str:
    """
    Abbreviate a USD market cap.

    Examples:
        "2500000" -> "3M", "1500" -> "2K", "42" -> "42"
    """
    try:
        num = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return "N/A"
    if not num.is_finite():
        return "N/A"

    if num >= 1_000_000:
        return f"{_round_half_up(num / 1_000_000)}M"
    elif num >= 1_000:
        return f"{_round_half_up(num / 1_000)}K"
    return _round_half_up(num)


def format_holding(value) -> str:
    try:
        return f"{float(value):.6f}"
    except (TypeError, ValueError):
        return "0.000000"


def _get(row: Dict[str, Any], *path: str) -> Any:
    node: Any = row
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


class ResponseFormatter:
    """Renders backend rows as display lines, one line per row."""

    def __init__(self, trending_window_hours: float = 24.0):
        self.trending_window_hours = trending_window_hours

    def format(self, intent: Intent, records: List[Dict[str, Any]], params=None) -> List[str]:
        if intent == Intent.UNSUPPORTED:
            raise ValueError(f"No formatter for intent {intent.value}")
        if not records:
            return [self.empty_line(intent, params)]

        if intent == Intent.MARKET_CAP:
            return [self.market_cap_line(row) for row in records]
        if intent == Intent.TOP_HOLDERS:
            return [self.holder_line(row) for row in records]
        if intent == Intent.TOP_BUYERS:
            return [self.buyer_line(row) for row in records]
        if intent == Intent.TRENDING:
            return [self.trending_line(row) for row in records]
        raise ValueError(f"No formatter for intent {intent.value}")

    def headline(self, intent: Intent, params=None) -> str:
        if intent == Intent.MARKET_CAP and isinstance(params, MarketCapParams):
            return f'Marketcap Data for term: "{params.term}":'
        if intent == Intent.TOP_HOLDERS and isinstance(params, TopHoldersParams):
            return f"Top {TOP_HOLDERS_LIMIT} holders for: {params.mint_address}"
        if intent == Intent.TOP_BUYERS and isinstance(params, TopBuyersParams):
            return f"Top {params.count} buyers for: {params.mint_address}"
        if intent == Intent.TRENDING:
            return f"Top {TRENDING_LIMIT} Trending Tokens {self.trending_window_hours:g}h:"
        return ""

    def empty_line(self, intent: Intent, params=None) -> str:
        if intent == Intent.MARKET_CAP:
            return f'No results found for term: "{getattr(params, "term", "")}"'
        if intent == Intent.TOP_HOLDERS:
            return f"No top holders found for MintAddress: {getattr(params, 'mint_address', '')}"
        if intent == Intent.TOP_BUYERS:
            return f"No top buyers found for MintAddress: {getattr(params, 'mint_address', '')}"
        if intent == Intent.TRENDING:
            return "No trending tokens found."
        raise ValueError(f"No formatter for intent {intent.value}")

    def market_cap_line(self, row: Dict[str, Any]) -> str:
        marketcap = format_marketcap(_get(row, "TokenSupplyUpdate", "Marketcap"))
        symbol = _get(row, "TokenSupplyUpdate", "Currency", "Symbol") or "Unknown Token"
        mint_address = _get(row, "TokenSupplyUpdate", "Currency", "MintAddress") or "Unknown Address"
        return f"{symbol} | {mint_address} | Marketcap: {marketcap}"

    def holder_line(self, row: Dict[str, Any]) -> str:
        address = _get(row, "BalanceUpdate", "Account", "Address") or "Unknown Address"
        holding = _get(row, "BalanceUpdate", "Holding")
        holding = format_holding(holding) if holding else "0.000000"
        return f"{address} | Holdings: {holding}"

    def buyer_line(self, row: Dict[str, Any]) -> str:
        amount = _get(row, "Trade", "Buy", "Amount")
        owner = _get(row, "Trade", "Buy", "Account", "Token", "Owner")
        return f"Amount: {amount if amount is not None else '0'} | Owner: {owner or 'Unknown Address'}"

    def trending_line(self, row: Dict[str, Any]) -> str:
        name = _get(row, "Trade", "Currency", "Name") or "Unknown Token"
        mint_address = _get(row, "Trade", "Currency", "MintAddress") or "Unknown Address"
        return f"{mint_address} | {name}"
