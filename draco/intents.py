import re
from enum import Enum


class Intent(str, Enum):
    MARKET_CAP = "MarketCap"
    TOP_HOLDERS = "TopHolders"
    TOP_BUYERS = "TopBuyers"
    TRENDING = "Trending"
    UNSUPPORTED = "Unsupported"


# Evaluated in order, first match wins: "marketcap" beats "trending" when both appear.
INTENT_PATTERNS = [
    (Intent.MARKET_CAP, re.compile(r"marketcap", re.IGNORECASE)),
    (Intent.TOP_HOLDERS, re.compile(r"top.*holders", re.IGNORECASE)),
    (Intent.TOP_BUYERS, re.compile(r"first.*top.*buyers", re.IGNORECASE)),
    (Intent.TRENDING, re.compile(r"trending", re.IGNORECASE)),
]


def classify(question: str) -> Intent:
    """Pick the intent of a free-text question; never fails."""
    for intent, pattern in INTENT_PATTERNS:
        if pattern.search(question or ""):
            return intent
    return Intent.UNSUPPORTED
