from unittest.mock import Mock

import pytest
from conftest import PUMP_MINT, USDC_MINT, FakeAnalytics, FakeRegistry

import draco.question_handler as question_handler
from draco.errors import TransportError
from draco.intents import Intent
from draco.question_handler import QuestionHandler


def make_handler(builder, registry=None, analytics=None):
    return QuestionHandler(
        registry=registry or FakeRegistry(),
        analytics=analytics or FakeAnalytics(),
        builder=builder,
    )


def marketcap_row(symbol, mint, value):
    return {"TokenSupplyUpdate": {"Marketcap": value, "Currency": {"Symbol": symbol, "MintAddress": mint}}}


@pytest.mark.asyncio
async def test_marketcap_end_to_end(builder):
    rows = [
        marketcap_row("ABC", USDC_MINT, "2500000"),
        marketcap_row("ABCD", PUMP_MINT, "1500"),
        marketcap_row("XABC", "So11111111111111111111111111111111111111112", "42"),
    ]
    analytics = FakeAnalytics(rows=rows)
    handler = make_handler(builder, analytics=analytics)

    reply = await handler.ask("draco", 'What is the Marketcap for term:"ABC" count: 3')

    assert reply.intent == Intent.MARKET_CAP
    assert not reply.is_error
    assert reply.headline == 'Marketcap Data for term: "ABC":'
    assert reply.lines == [
        f"ABC | {USDC_MINT} | Marketcap: 3M",
        f"ABCD | {PUMP_MINT} | Marketcap: 2K",
        "XABC | So11111111111111111111111111111111111111112 | Marketcap: 42",
    ]
    assert reply.records == rows
    assert analytics.docs[0].variables == {"term": "ABC", "count": 3}


@pytest.mark.asyncio
async def test_missing_term_never_reaches_backend(builder):
    analytics = FakeAnalytics()
    handler = make_handler(builder, analytics=analytics)

    reply = await handler.ask("draco", "What is the Marketcap count: 3")

    assert reply.lines == ["Please provide a valid search term."]
    assert analytics.docs == []


@pytest.mark.asyncio
async def test_missing_mint_address(builder):
    analytics = FakeAnalytics()
    reply = await make_handler(builder, analytics=analytics).ask("draco", "Show the top holders")
    assert reply.lines == ["Please provide a valid MintAddress in the question."]
    assert analytics.docs == []


@pytest.mark.asyncio
async def test_no_holders_is_not_an_error(builder):
    reply = await make_handler(builder).ask("draco", f"Show the top holders of {USDC_MINT}")
    assert reply.intent == Intent.TOP_HOLDERS
    assert not reply.is_error
    assert reply.headline is None
    assert reply.lines == [f"No top holders found for MintAddress: {USDC_MINT}"]


@pytest.mark.asyncio
async def test_top_buyers(builder):
    rows = [{"Trade": {"Buy": {"Amount": "5", "Account": {"Token": {"Owner": "owner1"}}}}}]
    analytics = FakeAnalytics(rows=rows)
    reply = await make_handler(builder, analytics=analytics).ask("draco", f"first top 50 buyers of {PUMP_MINT}")

    assert analytics.docs[0].variables == {"token": PUMP_MINT, "limit": 50}
    assert reply.headline == f"Top 50 buyers for: {PUMP_MINT}"
    assert reply.lines == ["Amount: 5 | Owner: owner1"]


@pytest.mark.asyncio
async def test_trending(builder):
    rows = [{"Trade": {"Currency": {"Name": "Pump", "MintAddress": PUMP_MINT}}}]
    reply = await make_handler(builder, analytics=FakeAnalytics(rows=rows)).ask("draco", "what is trending")
    assert reply.headline == "Top 5 Trending Tokens 24h:"
    assert reply.lines == [f"{PUMP_MINT} | Pump"]


@pytest.mark.asyncio
async def test_unsupported_question(builder):
    analytics = FakeAnalytics()
    reply = await make_handler(builder, analytics=analytics).ask("draco", "tell me a joke")
    assert reply.intent == Intent.UNSUPPORTED
    assert reply.lines == ['Unsupported question: "tell me a joke"']
    assert analytics.docs == []


@pytest.mark.asyncio
async def test_transport_error_is_reported(builder):
    analytics = FakeAnalytics(error=TransportError("Too Many Requests", status=429))
    reply = await make_handler(builder, analytics=analytics).ask("draco", f"top holders {USDC_MINT}")

    assert reply.is_error
    assert reply.lines == ["Error fetching top holders from Bitquery: Too Many Requests"]
    assert len(analytics.docs) == 1


@pytest.mark.parametrize(
    "question",
    [
        'Marketcap term:"ABC"',
        f"top holders {USDC_MINT}",
        f"first top 3 buyers {USDC_MINT}",
        "trending",
        "unsupported",
    ],
)
@pytest.mark.asyncio
async def test_unregistered_agent_short_circuits(builder, monkeypatch, question):
    classify = Mock()
    monkeypatch.setattr(question_handler, "classify", classify)
    registry = FakeRegistry(exists=False)
    analytics = FakeAnalytics()

    reply = await make_handler(builder, registry=registry, analytics=analytics).ask("ghost", question)

    assert reply.is_error
    assert reply.lines == ['Cannot process request. Agent "ghost" is not registered.']
    assert registry.checked == ["ghost"]
    classify.assert_not_called()
    assert analytics.docs == []


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(builder):
    analytics = FakeAnalytics(error=RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        await make_handler(builder, analytics=analytics).ask("draco", "trending")


@pytest.mark.asyncio
async def test_rejected_term_never_reaches_backend(builder):
    analytics = FakeAnalytics()
    reply = await make_handler(builder, analytics=analytics).ask("draco", 'marketcap term:"   "')

    assert reply.intent == Intent.MARKET_CAP
    assert reply.is_error
    assert reply.lines == ["Invalid value for term: '   '"]
    assert analytics.docs == []
