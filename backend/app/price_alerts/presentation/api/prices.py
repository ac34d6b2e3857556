"""Cached price lookup endpoint.

Implements GET /api/prices/{asset_id}, served from the price cache the
alert cycle keeps warm. It never calls the upstream price source.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from app.core.config import get_settings
from app.price_alerts.application.dto.price_dto import AssetPriceDTO
from app.price_alerts.application.exceptions import CacheUnavailableError
from app.price_alerts.application.interfaces.price_cache import PriceCache
from app.price_alerts.domain.value_objects.asset_id import normalize_asset_id

router = APIRouter()


def get_price_cache(request: Request) -> PriceCache:
    """Dependency returning the application's price cache."""
    return request.app.state.price_cache


@router.get("/prices/{asset_id}", response_model=AssetPriceDTO)
async def get_price(
    asset_id: Annotated[str, Path(description="Asset identifier (e.g., bitcoin)")],
    cache: PriceCache = Depends(get_price_cache),
) -> AssetPriceDTO:
    """Get the last fresh cached price of an asset.

    Args:
        asset_id: The asset to look up (case-insensitive).
        cache: Price cache (injected).

    Returns:
        AssetPriceDTO with the cached price.

    Raises:
        HTTPException: 404 if no fresh price is cached for the asset.
        HTTPException: 503 if the cache is unavailable.
    """
    try:
        normalized = normalize_asset_id(asset_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        snapshot = await cache.get([normalized])
    except CacheUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e

    price = snapshot.price_for(normalized)
    if price is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No fresh price cached for '{normalized}'",
        )

    return AssetPriceDTO(
        asset_id=normalized,
        price=price,
        quote_currency=get_settings().quote_currency,
    )
