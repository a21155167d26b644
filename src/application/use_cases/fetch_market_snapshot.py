"""
Use-case: fetch current price and 24h change for a set of catalog assets.
Depends only on Domain ports and entities - no infrastructure imports.
"""

from typing import Iterable

from src.domain.entities.asset import CurrencyCode
from src.domain.entities.market_data import SnapshotEntry
from src.domain.ports.market_data_port import IMarketDataProvider


class FetchMarketSnapshotUseCase:
    def __init__(self, provider: IMarketDataProvider) -> None:
        self._provider = provider

    async def execute(
        self, asset_ids: Iterable[str], currency: CurrencyCode
    ) -> list[SnapshotEntry]:
        """Fetch the snapshot for *asset_ids* (lowercased, duplicates dropped).

        Raises:
            ValueError: if no asset id is given.
            ProviderError: propagated from the IMarketDataProvider on API failure.
        """
        ids = list(dict.fromkeys(i.strip().lower() for i in asset_ids if i and i.strip()))
        if not ids:
            raise ValueError("asset_ids must contain at least one id")
        return await self._provider.fetch_snapshot(ids, currency)
