"""
Infrastructure adapter: CoinGecko public API v3 -> IMarketDataProvider.
All CoinGecko-specific details (endpoints, query parameters, payload shapes) are
confined here; the rest of the codebase depends only on IMarketDataProvider.

Every httpx failure and every non-2xx response is translated into ProviderError;
payloads missing the fields we need become MalformedPayloadError. No retries.
"""

import logging
from typing import Any, Iterable, Optional
from urllib.parse import quote

import httpx

from src.domain.entities.asset import CurrencyCode
from src.domain.entities.market_data import PricePoint, SnapshotEntry
from src.domain.exceptions import MalformedPayloadError, ProviderError
from src.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)


class CoinGeckoMarketDataProvider(IMarketDataProvider):
    """Fetches market snapshots and price history from the CoinGecko REST API."""

    DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"
    MARKETS_PATH = "/coins/markets"
    MARKET_CHART_PATH_TEMPLATE = "/coins/{coin_id}/market_chart"
    API_KEY_HEADER = "x-cg-demo-api-key"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Args:
            base_url: API root, without a trailing slash.
            timeout:  Per-request timeout in seconds.
            api_key:  Optional CoinGecko demo API key.
            client:   Pre-configured AsyncClient (tests pass one with a MockTransport).
                      Its base_url is used as-is.
        """
        if client is None:
            headers = {"accept": "application/json"}
            if api_key:
                headers[self.API_KEY_HEADER] = api_key
            client = httpx.AsyncClient(
                base_url=base_url.rstrip("/"), timeout=timeout, headers=headers
            )
        self._client = client

    # ------------------------------------------------------------------
    # IMarketDataProvider interface
    # ------------------------------------------------------------------

    async def fetch_snapshot(
        self, asset_ids: Iterable[str], currency: CurrencyCode
    ) -> list[SnapshotEntry]:
        ids = list(asset_ids)
        payload = await self._get_json(
            self.MARKETS_PATH,
            params={"vs_currency": currency.value.lower(), "ids": ",".join(ids)},
        )
        if not isinstance(payload, list):
            raise MalformedPayloadError(
                f"Expected a list from {self.MARKETS_PATH}, got {type(payload).__name__}"
            )
        entries = [self._to_snapshot_entry(item) for item in payload]
        logger.debug("Snapshot: %d of %d assets in %s", len(entries), len(ids), currency.value)
        return entries

    async def fetch_history(
        self, asset_id: str, currency: CurrencyCode, days: int
    ) -> list[PricePoint]:
        path = self.MARKET_CHART_PATH_TEMPLATE.format(coin_id=quote(asset_id, safe=""))
        payload = await self._get_json(
            path,
            params={"vs_currency": currency.value.lower(), "days": str(days)},
        )
        prices = payload.get("prices") if isinstance(payload, dict) else None
        if not isinstance(prices, list):
            raise MalformedPayloadError(f"Missing 'prices' series for {asset_id!r}")
        points = [self._to_price_point(pair, asset_id) for pair in prices]
        logger.debug("History: %d points for %s/%s", len(points), asset_id, currency.value)
        return points

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        logger.debug("GET %s %s", path, params)
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Request to {path} failed: {exc}") from exc

        if not response.is_success:
            raise ProviderError(f"{path} returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedPayloadError(f"{path} returned invalid JSON") from exc

    @staticmethod
    def _number(item: dict, key: str, context: str) -> float:
        value = item.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedPayloadError(f"{context}: field {key!r} is missing or not numeric")
        return float(value)

    @classmethod
    def _to_snapshot_entry(cls, item: Any) -> SnapshotEntry:
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            raise MalformedPayloadError("Snapshot entry without an 'id'")
        asset_id = item["id"]
        return SnapshotEntry(
            asset_id=asset_id,
            current_price=cls._number(item, "current_price", asset_id),
            change_24h_percent=cls._number(item, "price_change_percentage_24h", asset_id),
        )

    @staticmethod
    def _to_price_point(pair: Any, asset_id: str) -> PricePoint:
        if (
            not isinstance(pair, (list, tuple))
            or len(pair) < 2
            or any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in pair[:2])
        ):
            raise MalformedPayloadError(f"Malformed price point for {asset_id!r}: {pair!r}")
        return PricePoint(timestamp_millis=int(pair[0]), price=float(pair[1]))
