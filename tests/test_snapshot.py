"""Tests for the shared all-markets snapshot board."""

import asyncio

import pytest

from marketquotes.config import ProviderType, QuoteLayerConfig
from marketquotes.manager import QuoteService
from marketquotes.providers.mock import MockProvider
from marketquotes.snapshot import SNAPSHOT_SYMBOLS, MarketSnapshot


def _board(provider, cache, clock, symbols=("SPX", "NDX")) -> MarketSnapshot:
    config = QuoteLayerConfig(providers=[ProviderType.MOCK])
    service = QuoteService(config, providers=[provider], cache=cache)
    return MarketSnapshot(service, symbols=symbols, clock=clock)


class TestMarketSnapshot:
    def test_board_fits_in_one_batch(self):
        assert len(SNAPSHOT_SYMBOLS) <= QuoteLayerConfig().max_symbols
        assert len(set(SNAPSHOT_SYMBOLS)) == len(SNAPSHOT_SYMBOLS)

    @pytest.mark.asyncio
    async def test_first_call_builds(self, yahoo, cache, clock):
        yahoo.set_price("^GSPC", 6050.0)
        yahoo.set_price("^IXIC", 21500.0)
        board = _board(yahoo, cache, clock)

        snap = await board.get()

        assert snap["success"] is True
        assert snap["cached"] is False
        assert snap["stale"] is False
        assert snap["prices"]["SPX"]["last"] == 6050.0
        assert board.builds == 1

    @pytest.mark.asyncio
    async def test_reused_within_ttl(self, yahoo, cache, clock):
        yahoo.set_price("^GSPC", 6050.0)
        yahoo.set_price("^IXIC", 21500.0)
        board = _board(yahoo, cache, clock)

        await board.get()
        clock.advance(59)
        snap = await board.get()

        assert snap["cached"] is True
        assert board.builds == 1
        assert yahoo.calls == ["^GSPC", "^IXIC"]

    @pytest.mark.asyncio
    async def test_rebuilt_after_ttl(self, yahoo, cache, clock):
        yahoo.set_price("^GSPC", 6050.0)
        yahoo.set_price("^IXIC", 21500.0)
        board = _board(yahoo, cache, clock)

        await board.get()
        clock.advance(61)
        yahoo.set_price("^GSPC", 6075.0)
        snap = await board.get()

        assert snap["cached"] is False
        assert snap["prices"]["SPX"]["last"] == 6075.0
        assert board.builds == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_build(self, cache, clock):
        slow = MockProvider("yahoo", {"^GSPC": 6050.0, "^IXIC": 21500.0}, delay=0.05)
        board = _board(slow, cache, clock)

        snaps = await asyncio.gather(*(board.get() for _ in range(5)))

        assert board.builds == 1
        assert all(s["success"] for s in snaps)
        assert slow.calls == ["^GSPC", "^IXIC"]

    @pytest.mark.asyncio
    async def test_last_good_served_when_rebuild_has_no_live_prices(self, yahoo, cache, clock):
        yahoo.set_price("^GSPC", 6050.0)
        yahoo.set_price("^IXIC", 21500.0)
        board = _board(yahoo, cache, clock)
        first = await board.get()

        yahoo.set_failing()
        clock.advance(10 * 60)
        board.invalidate()
        snap = await board.get()

        assert snap["stale"] is True
        assert snap["cached"] is True
        assert snap["snapshot_timestamp"] == first["snapshot_timestamp"]
        assert snap["prices"]["SPX"]["last"] == 6050.0

    @pytest.mark.asyncio
    async def test_last_good_expires(self, yahoo, cache, clock):
        yahoo.set_price("^GSPC", 6050.0)
        yahoo.set_price("^IXIC", 21500.0)
        board = _board(yahoo, cache, clock)
        await board.get()

        yahoo.set_failing()
        clock.advance(31 * 60)
        snap = await board.get()

        # Falls through to the per-symbol fallbacks instead
        assert snap["stale"] is True
        assert snap["cached"] is False
        assert snap["prices"]["SPX"]["status"] == "stale"
