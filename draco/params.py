import re
from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from .errors import MissingParameter
from .intents import Intent

DEFAULT_COUNT = 10
MAX_MARKETCAP_COUNT = 30
TOP_HOLDERS_LIMIT = 10
TRENDING_LIMIT = 5

COUNT_PATTERN = re.compile(r"count:\s*(\d+)", re.IGNORECASE)
TERM_PATTERN = re.compile(r'term:\s*"([^"]+)"', re.IGNORECASE)
MINT_ADDRESS_PATTERN = re.compile(r"[A-Za-z0-9]{32,44}")
BUYERS_COUNT_PATTERN = re.compile(r"first.*top\s*(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class MarketCapParams:
    count: int
    term: str


@dataclass(frozen=True)
class TopHoldersParams:
    mint_address: str


@dataclass(frozen=True)
class TopBuyersParams:
    mint_address: str
    count: int


@dataclass(frozen=True)
class TrendingParams:
    pass


ExtractedParameters = Union[MarketCapParams, TopHoldersParams, TopBuyersParams, TrendingParams]


def extract_count(question: str) -> int:
    """Read `count: N`, default 10, clamped to [1, 30]."""
    match = COUNT_PATTERN.search(question)
    if not match:
        return DEFAULT_COUNT
    return max(1, min(int(match.group(1)), MAX_MARKETCAP_COUNT))


def extract_term(question: str) -> Optional[str]:
    match = TERM_PATTERN.search(question)
    return match.group(1) if match else None


def extract_mint_address(question: str) -> Optional[str]:
    # Only the first candidate is used; later addresses in the question are ignored.
    match = MINT_ADDRESS_PATTERN.search(question)
    return match.group(0) if match else None


def extract_buyers_count(question: str) -> int:
    match = BUYERS_COUNT_PATTERN.search(question)
    if not match:
        return DEFAULT_COUNT
    count = max(1, int(match.group(1)))
    if count > MAX_MARKETCAP_COUNT:
        # TODO: decide whether first-buyer counts share the marketcap ceiling of 30
        logger.warning(f"Top buyers count above {MAX_MARKETCAP_COUNT} passed through | Count: {count}")
    return count


def extract_parameters(intent: Intent, question: str) -> ExtractedParameters:
    """
    Pull the parameters an intent needs out of the question.

    Raises:
        MissingParameter: when a required parameter (term or mint address) is absent.
        ValueError: for the Unsupported intent, which has no parameters to extract.
    """
    if intent == Intent.MARKET_CAP:
        term = extract_term(question)
        if not term:
            raise MissingParameter("term")
        return MarketCapParams(count=extract_count(question), term=term)

    if intent in (Intent.TOP_HOLDERS, Intent.TOP_BUYERS):
        mint_address = extract_mint_address(question)
        if not mint_address:
            raise MissingParameter("mintAddress")
        if intent == Intent.TOP_HOLDERS:
            return TopHoldersParams(mint_address=mint_address)
        return TopBuyersParams(mint_address=mint_address, count=extract_buyers_count(question))

    if intent == Intent.TRENDING:
        return TrendingParams()

    raise ValueError(f"No parameters for intent {intent.value}")
