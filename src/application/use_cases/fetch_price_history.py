"""
Use-case: fetch the recent price history of one asset.
Depends only on Domain ports and entities - no infrastructure imports.
"""

from src.domain.entities.asset import CurrencyCode
from src.domain.entities.market_data import PricePoint
from src.domain.ports.market_data_port import IMarketDataProvider


class FetchPriceHistoryUseCase:
    DEFAULT_DAYS: int = 7

    def __init__(self, provider: IMarketDataProvider) -> None:
        self._provider = provider

    async def execute(
        self,
        asset_id: str,
        currency: CurrencyCode,
        days: int = DEFAULT_DAYS,
    ) -> list[PricePoint]:
        """Fetch *days* days of prices for *asset_id* (lowercased).

        Raises:
            ValueError: if *asset_id* is blank or *days* is not positive.
            ProviderError: propagated from the IMarketDataProvider on API failure.
        """
        if not asset_id or not asset_id.strip():
            raise ValueError("asset_id must be a non-empty string")
        if days <= 0:
            raise ValueError(f"days must be positive, got {days}")
        return await self._provider.fetch_history(asset_id.strip().lower(), currency, days)
