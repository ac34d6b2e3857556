"""Application services shared by use cases."""

from app.price_alerts.application.services.price_fetcher import PriceFetcher

__all__ = ["PriceFetcher"]
