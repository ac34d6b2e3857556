"""Unit tests for PriceFetcher."""

from decimal import Decimal

import pytest

from app.price_alerts.application.exceptions import UpstreamError
from app.price_alerts.application.services.price_fetcher import PriceFetcher
from tests.fakes import FakePriceSource, upstream_down


class TestFetch:
    """Tests for PriceFetcher.fetch."""

    @pytest.mark.asyncio
    async def test_returns_requested_prices(self) -> None:
        source = FakePriceSource.with_prices({"bitcoin": 50000.5, "ethereum": "3100"})
        fetcher = PriceFetcher(source)

        snapshot = await fetcher.fetch(["bitcoin", "ethereum"])

        assert snapshot.price_for("bitcoin") == Decimal("50000.5")
        assert snapshot.price_for("ethereum") == Decimal("3100")

    @pytest.mark.asyncio
    async def test_normalizes_and_deduplicates_ids(self) -> None:
        source = FakePriceSource.with_prices({"bitcoin": 1})
        fetcher = PriceFetcher(source)

        await fetcher.fetch([" Bitcoin", "bitcoin", "BITCOIN "])

        assert source.calls == [(["bitcoin"], "usd")]

    @pytest.mark.asyncio
    async def test_empty_request_skips_source(self) -> None:
        source = FakePriceSource.with_prices({"bitcoin": 1})

        snapshot = await PriceFetcher(source).fetch([])

        assert snapshot.is_empty
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_entries_are_left_out(self) -> None:
        source = FakePriceSource({
            "bitcoin": {"usd": 50000},
            "ethereum": {"eur": 2800},
            "solana": "not-an-object",
            "dogecoin": {"usd": "abc"},
            "tether": {"usd": -1},
        })
        fetcher = PriceFetcher(source)

        snapshot = await fetcher.fetch(
            ["bitcoin", "ethereum", "solana", "dogecoin", "tether", "cardano"]
        )

        assert snapshot.asset_ids == frozenset({"bitcoin"})

    @pytest.mark.asyncio
    async def test_uses_configured_currency(self) -> None:
        source = FakePriceSource.with_prices({"bitcoin": 46000}, currency="eur")
        fetcher = PriceFetcher(source, quote_currency="EUR")

        snapshot = await fetcher.fetch(["bitcoin"])

        assert source.calls == [(["bitcoin"], "eur")]
        assert snapshot.price_for("bitcoin") == Decimal("46000")

    @pytest.mark.asyncio
    async def test_non_object_payload_raises(self) -> None:
        source = FakePriceSource(payload=["bitcoin"])  # type: ignore[arg-type]

        with pytest.raises(UpstreamError, match="Malformed payload"):
            await PriceFetcher(source).fetch(["bitcoin"])

    @pytest.mark.asyncio
    async def test_source_error_propagates(self) -> None:
        source = FakePriceSource(error=upstream_down())

        with pytest.raises(UpstreamError) as exc_info:
            await PriceFetcher(source).fetch(["bitcoin"])

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self) -> None:
        source = FakePriceSource.with_prices({"bitcoin": 1})
        source.delay = 1.0
        fetcher = PriceFetcher(source, timeout_seconds=0.01)

        with pytest.raises(UpstreamError, match="did not answer"):
            await fetcher.fetch(["bitcoin"])
