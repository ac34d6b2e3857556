"""Price fetcher turning raw price-source payloads into snapshots."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from app.price_alerts.application.exceptions import UpstreamError
from app.price_alerts.application.interfaces.price_source import PriceSource
from app.price_alerts.domain.entities.price_snapshot import PriceSnapshot
from app.price_alerts.domain.value_objects.asset_id import distinct_asset_ids
from app.price_alerts.domain.value_objects.price import Price

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class PriceFetcher:
    """Wraps a PriceSource and returns point-in-time PriceSnapshots.

    Ids are normalized and de-duplicated before the upstream call, and the
    call is bounded by ``timeout_seconds``. Assets the source does not price
    are left out of the snapshot rather than failing the call. No retries
    happen here; the scheduler retries on its next tick.

    Attributes:
        _source: Upstream price API adapter.
        _quote_currency: Currency prices are requested in.
        _timeout_seconds: Upper bound for one upstream call.
    """

    def __init__(
        self,
        source: PriceSource,
        quote_currency: str = "usd",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._source = source
        self._quote_currency = quote_currency.lower()
        self._timeout_seconds = timeout_seconds

    @property
    def quote_currency(self) -> str:
        return self._quote_currency

    async def fetch(self, asset_ids: Iterable[str]) -> PriceSnapshot:
        """Fetch current prices for the given assets.

        Args:
            asset_ids: Asset identifiers, in any form.

        Returns:
            Snapshot holding every requested asset the source priced.

        Raises:
            UpstreamError: On timeout, transport failure, non-2xx status or
                a malformed payload.
        """
        ids = distinct_asset_ids(asset_ids)
        if not ids:
            return PriceSnapshot()

        try:
            payload = await asyncio.wait_for(
                self._source.fetch_prices(ids, self._quote_currency),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError(
                f"{self._source.source_name} did not answer within "
                f"{self._timeout_seconds}s"
            ) from e

        snapshot = self._to_snapshot(ids, payload)
        missing = [a for a in ids if a not in snapshot.prices]
        if missing:
            logger.info(f"No {self._quote_currency} price for: {', '.join(missing)}")
        return snapshot

    def _to_snapshot(self, ids: list[str], payload: Any) -> PriceSnapshot:
        """Extract requested prices from a ``{id: {currency: price}}`` payload."""
        if not isinstance(payload, Mapping):
            raise UpstreamError(
                f"Malformed payload from {self._source.source_name}: "
                f"expected an object, got {type(payload).__name__}"
            )

        entries = {
            key.strip().lower(): value
            for key, value in payload.items()
            if isinstance(key, str)
        }

        prices: dict[str, Decimal] = {}
        for asset_id in ids:
            entry = entries.get(asset_id)
            if not isinstance(entry, Mapping):
                continue
            raw_price = entry.get(self._quote_currency)
            if raw_price is None:
                continue
            try:
                prices[asset_id] = Price.from_raw(raw_price, self._quote_currency).value
            except ValueError as e:
                logger.warning(f"Ignoring price for {asset_id}: {e}")

        return PriceSnapshot(prices=prices, captured_at=datetime.now(timezone.utc))
