"""
Domain entities for market data returned by the provider and derived from it.
Zero external dependencies - pure Python dataclasses only.
"""

from dataclasses import dataclass, field

from src.domain.entities.asset import CurrencyCode


@dataclass(frozen=True)
class SnapshotEntry:
    asset_id: str
    current_price: float
    change_24h_percent: float


@dataclass(frozen=True)
class PricePoint:
    timestamp_millis: int
    price: float


@dataclass(frozen=True)
class ChartSeries:
    """Chart-ready series; ``labels[i]`` belongs to ``values[i]``."""

    label: str
    labels: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class Selection:
    asset_id: str
    currency: CurrencyCode
