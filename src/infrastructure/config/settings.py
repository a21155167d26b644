"""
Runtime settings read from environment variables.

The entry point calls python-dotenv's load_dotenv() before Settings.from_env(),
so values may also come from a local .env file.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from src.application.services.asset_catalog import DEFAULT_ASSET_IDS
from src.application.services.formatting import DEFAULT_DATE_FORMAT
from src.domain.entities.asset import CurrencyCode
from src.infrastructure.market_data.coingecko_adapter import CoinGeckoMarketDataProvider


@dataclass(frozen=True)
class Settings:
    base_url: str = CoinGeckoMarketDataProvider.DEFAULT_BASE_URL
    timeout: float = 10.0
    api_key: Optional[str] = None
    catalog_assets: tuple[str, ...] = DEFAULT_ASSET_IDS
    default_asset: str = DEFAULT_ASSET_IDS[0]
    default_currency: CurrencyCode = CurrencyCode.USD
    history_days: int = 7
    chart_date_format: str = DEFAULT_DATE_FORMAT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.catalog_assets:
            raise ValueError("CATALOG_ASSETS must name at least one asset")
        if self.default_asset not in self.catalog_assets:
            raise ValueError(
                f"DEFAULT_ASSET {self.default_asset!r} is not in CATALOG_ASSETS"
            )
        if self.history_days <= 0:
            raise ValueError(f"HISTORY_DAYS must be positive, got {self.history_days}")
        if self.timeout <= 0:
            raise ValueError(f"MARKET_DATA_TIMEOUT must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        catalog = tuple(
            part.strip().lower()
            for part in env.get("CATALOG_ASSETS", ",".join(DEFAULT_ASSET_IDS)).split(",")
            if part.strip()
        )
        return cls(
            base_url=env.get("MARKET_DATA_BASE_URL", cls.base_url),
            timeout=float(env.get("MARKET_DATA_TIMEOUT", cls.timeout)),
            api_key=env.get("MARKET_DATA_API_KEY") or None,
            catalog_assets=catalog,
            default_asset=env.get("DEFAULT_ASSET", catalog[0] if catalog else "").strip().lower(),
            default_currency=CurrencyCode.parse(env.get("DEFAULT_CURRENCY", "USD")),
            history_days=int(env.get("HISTORY_DAYS", cls.history_days)),
            chart_date_format=env.get("CHART_DATE_FORMAT", cls.chart_date_format),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
        )
