"""
Application service: the market dashboard engine.

Wires the asset catalog, the selection controller and one fetch state machine per
concern (snapshot, history) and republishes a DashboardView to subscribers after
every change. Inbound calls are synchronous and must be made from the running
event loop; fetches they trigger run as tasks on that loop.

Infrastructure adapters (IMarketDataProvider) are injected; nothing here knows
about HTTP.
"""

import asyncio
import itertools
import logging
from typing import Callable

from src.application.services.asset_catalog import AssetCatalog
from src.application.services.fetch_state_machine import FetchStateMachine
from src.application.services.selection_controller import SelectionChanged, SelectionController
from src.application.services.time_series_transformer import TimeSeriesTransformer
from src.application.use_cases.fetch_market_snapshot import FetchMarketSnapshotUseCase
from src.application.use_cases.fetch_price_history import FetchPriceHistoryUseCase
from src.domain.entities.asset import Asset, CurrencyCode
from src.domain.entities.dashboard_view import DashboardView
from src.domain.entities.fetch_state import FetchState
from src.domain.entities.market_data import ChartSeries, Selection, SnapshotEntry
from src.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)

ViewListener = Callable[[DashboardView], None]

SNAPSHOT = "snapshot"
HISTORY = "history"


class MarketDashboard:
    def __init__(
        self,
        catalog: AssetCatalog,
        provider: IMarketDataProvider,
        selection: SelectionController,
        transformer: TimeSeriesTransformer | None = None,
        history_days: int = FetchPriceHistoryUseCase.DEFAULT_DAYS,
    ) -> None:
        """
        Args:
            catalog:      Supported assets; the snapshot covers all of them.
            provider:     IMarketDataProvider implementation (e.g. CoinGecko adapter).
            selection:    Controller holding the initial selection.
            transformer:  History -> chart converter; a UTC one by default.
            history_days: Window requested for every history fetch.
        """
        if history_days <= 0:
            raise ValueError(f"history_days must be positive, got {history_days}")
        self._catalog = catalog
        self._selection = selection
        self._transformer = transformer or TimeSeriesTransformer()
        self._history_days = history_days
        self._snapshot_uc = FetchMarketSnapshotUseCase(provider)
        self._history_uc = FetchPriceHistoryUseCase(provider)
        self._snapshot_generations = itertools.count(1)
        self._filtered: tuple[Asset, ...] = tuple(catalog.all())
        self._listeners: list[ViewListener] = []

        self.snapshot: FetchStateMachine[list[SnapshotEntry]] = FetchStateMachine(
            SNAPSHOT, on_transition=self._on_transition
        )
        self.history: FetchStateMachine[ChartSeries] = FetchStateMachine(
            HISTORY, on_transition=self._on_transition
        )
        self._unsubscribe_selection = selection.subscribe(self._on_selection_changed)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> AssetCatalog:
        return self._catalog

    @property
    def history_days(self) -> int:
        return self._history_days

    @property
    def view(self) -> DashboardView:
        return DashboardView(
            snapshot_state=self.snapshot.state,
            history_state=self.history.state,
            filtered_assets=self._filtered,
            selection=self._selection.selection,
            generation=self._selection.generation,
        )

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register *listener* for view updates; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load the snapshot and the history of the initial selection."""
        current = self._selection.selection
        self._catalog.get(current.asset_id)
        self.reload_snapshot()
        self._selection.select(current.asset_id, current.currency)

    def search(self, query: str) -> list[Asset]:
        self._filtered = tuple(self._catalog.filter(query))
        self._publish()
        return list(self._filtered)

    def select_asset(self, asset_id: str) -> int:
        """Select *asset_id* in the current currency; returns the new generation.

        Selecting the current asset again re-fetches its history (manual retry).

        Raises:
            UnknownAssetError: if *asset_id* is not in the catalog.
        """
        asset = self._catalog.get(asset_id.strip().lower())
        return self._selection.select(asset.id, self._selection.selection.currency)

    def change_currency(self, currency: CurrencyCode) -> int:
        """Switch currency for both concerns; returns the new selection generation."""
        generation = self._selection.select(self._selection.selection.asset_id, currency)
        self.reload_snapshot()
        return generation

    def reload_snapshot(self) -> asyncio.Task:
        """Fetch a fresh snapshot for the whole catalog in the selected currency."""
        currency = self._selection.selection.currency
        asset_ids = self._catalog.ids()

        async def operation() -> list[SnapshotEntry]:
            return await self._snapshot_uc.execute(asset_ids, currency)

        return self.snapshot.run(next(self._snapshot_generations), operation)

    async def settle(self) -> None:
        """Wait for every in-flight fetch of both concerns to complete."""
        await self.snapshot.drain()
        await self.history.drain()

    def close(self) -> None:
        self._unsubscribe_selection()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _on_selection_changed(self, event: SelectionChanged) -> None:
        selection: Selection = event.selection
        days = self._history_days

        async def operation() -> ChartSeries:
            asset = self._catalog.get(selection.asset_id)
            points = await self._history_uc.execute(asset.id, selection.currency, days)
            return self._transformer.to_chart_series(points, asset.display_name, selection.currency)

        self.history.run(event.generation, operation)

    def _on_transition(self, concern: str, state: FetchState) -> None:
        logger.debug("%s -> %s", concern, state.status)
        self._publish()

    def _publish(self) -> None:
        view = self.view
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Dashboard view listener failed")
