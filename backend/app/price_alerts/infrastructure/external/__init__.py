# External clients - CoinGecko

from .coingecko_client import CoinGeckoClient

__all__ = ["CoinGeckoClient"]
