"""
Read-only view published to the presentation layer after every transition.
"""

from dataclasses import dataclass

from src.domain.entities.asset import Asset
from src.domain.entities.fetch_state import FetchState
from src.domain.entities.market_data import Selection


@dataclass(frozen=True)
class DashboardView:
    snapshot_state: FetchState
    history_state: FetchState
    filtered_assets: tuple[Asset, ...]
    selection: Selection
    generation: int
