"""
Port (interface) for market data providers.
Infrastructure adapters (e.g. CoinGeckoMarketDataProvider) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from src.domain.entities.asset import CurrencyCode
from src.domain.entities.market_data import PricePoint, SnapshotEntry


class IMarketDataProvider(ABC):
    @abstractmethod
    async def fetch_snapshot(
        self, asset_ids: Iterable[str], currency: CurrencyCode
    ) -> list[SnapshotEntry]:
        """Fetch current price and 24h change for every id in *asset_ids*.

        Raises:
            ProviderError: on a non-2xx response or transport failure.
            MalformedPayloadError: if an entry lacks a required numeric field.
        """
        ...

    @abstractmethod
    async def fetch_history(
        self, asset_id: str, currency: CurrencyCode, days: int
    ) -> list[PricePoint]:
        """Fetch the *days*-day price history of *asset_id*, ascending by time.

        Raises:
            ProviderError: on a non-2xx response or transport failure.
            MalformedPayloadError: if the ``prices`` series is missing or malformed.
        """
        ...

    async def aclose(self) -> None:
        """Release transport resources. Adapters without any keep this no-op."""
        return None
