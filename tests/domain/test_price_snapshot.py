"""Unit tests for the PriceSnapshot entity."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot


@pytest.fixture
def snapshot() -> PriceSnapshot:
    return PriceSnapshot(
        prices={"Bitcoin": Decimal("51000"), "ethereum": Decimal("3100.5")},
        captured_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestPriceSnapshot:
    """Tests for lookups and derived snapshots."""

    def test_keys_are_normalized(self, snapshot: PriceSnapshot) -> None:
        assert snapshot.asset_ids == frozenset({"bitcoin", "ethereum"})
        assert snapshot.price_for(" BITCOIN ") == Decimal("51000")
        assert "bitcoin" in snapshot

    def test_missing_asset(self, snapshot: PriceSnapshot) -> None:
        assert snapshot.price_for("solana") is None
        assert snapshot.price_for("") is None
        assert "solana" not in snapshot

    def test_prices_are_read_only(self, snapshot: PriceSnapshot) -> None:
        with pytest.raises(TypeError):
            snapshot.prices["bitcoin"] = Decimal("1")  # type: ignore[index]

    def test_empty_snapshot(self) -> None:
        empty = PriceSnapshot()
        assert empty.is_empty
        assert empty.to_payload() == {}

    def test_merge_prefers_other_and_latest_time(self, snapshot: PriceSnapshot) -> None:
        later = PriceSnapshot(
            prices={"ethereum": Decimal("2900"), "solana": Decimal("150")},
            captured_at=snapshot.captured_at + timedelta(seconds=5),
        )

        merged = snapshot.merge(later)

        assert merged.price_for("ethereum") == Decimal("2900")
        assert merged.price_for("bitcoin") == Decimal("51000")
        assert merged.price_for("solana") == Decimal("150")
        assert merged.captured_at == later.captured_at

    def test_restrict_to(self, snapshot: PriceSnapshot) -> None:
        restricted = snapshot.restrict_to(["ETHEREUM", "solana"])

        assert restricted.asset_ids == frozenset({"ethereum"})
        assert restricted.captured_at == snapshot.captured_at

    def test_to_payload(self, snapshot: PriceSnapshot) -> None:
        assert snapshot.to_payload() == {"bitcoin": 51000.0, "ethereum": 3100.5}
