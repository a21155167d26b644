"""
FastAPI entry point - the presentation-facing surface of the dashboard engine.

This module is the Composition Root: it wires the CoinGecko adapter, the asset
catalog, the selection controller and the dashboard, and exposes them over HTTP.
The initial snapshot and history fetches start in the lifespan handler; every
later fetch is triggered by a request and runs on the server's event loop.

Run locally:
    uvicorn src.infrastructure.entrypoints.fastapi_app:app --reload --port 8000
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse

load_dotenv()

from src.application.services.asset_catalog import AssetCatalog  # noqa: E402
from src.application.services.market_dashboard import MarketDashboard  # noqa: E402
from src.application.services.selection_controller import SelectionController  # noqa: E402
from src.application.services.time_series_transformer import TimeSeriesTransformer  # noqa: E402
from src.domain.entities.dashboard_view import DashboardView  # noqa: E402
from src.domain.entities.market_data import Selection  # noqa: E402
from src.domain.exceptions import UnknownAssetError  # noqa: E402
from src.domain.ports.market_data_port import IMarketDataProvider  # noqa: E402
from src.infrastructure.config.settings import Settings  # noqa: E402
from src.infrastructure.entrypoints.schemas import (  # noqa: E402
    AssetOut,
    CurrencyRequest,
    DashboardOut,
    SelectionRequest,
    to_dashboard_out,
)
from src.infrastructure.market_data.coingecko_adapter import CoinGeckoMarketDataProvider  # noqa: E402
from src.infrastructure.observability.logging_setup import configure_logging  # noqa: E402


def build_dashboard(settings: Settings, provider: IMarketDataProvider) -> MarketDashboard:
    catalog = AssetCatalog.from_ids(settings.catalog_assets)
    selection = SelectionController(
        Selection(asset_id=settings.default_asset, currency=settings.default_currency),
        validate_asset=catalog.get,
    )
    return MarketDashboard(
        catalog=catalog,
        provider=provider,
        selection=selection,
        transformer=TimeSeriesTransformer(date_format=settings.chart_date_format),
        history_days=settings.history_days,
    )


def get_dashboard(request: Request) -> MarketDashboard:
    """FastAPI dependency: the dashboard wired for this application."""
    return request.app.state.dashboard


def latest_view_only(queue: "asyncio.Queue[DashboardView]") -> Callable[[DashboardView], None]:
    """Listener feeding a maxsize=1 *queue*; an unread view is replaced by the newer one."""

    def push(view: DashboardView) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(view)

    return push


def _render(dashboard: MarketDashboard, view: Optional[DashboardView] = None) -> DashboardOut:
    return to_dashboard_out(view or dashboard.view, dashboard.catalog, dashboard.history_days)


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[IMarketDataProvider] = None,
) -> FastAPI:
    """Build the application. The default CoinGecko provider (and its HTTP client)
    is created on startup and closed on shutdown, so importing or building the
    app opens no connections; an injected *provider* is closed on shutdown too.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active_provider = provider or CoinGeckoMarketDataProvider(
            base_url=settings.base_url,
            timeout=settings.timeout,
            api_key=settings.api_key,
        )
        dashboard = build_dashboard(settings, active_provider)
        app.state.dashboard = dashboard
        try:
            dashboard.start()
            yield
            await dashboard.settle()
        finally:
            dashboard.close()
            await active_provider.aclose()

    app = FastAPI(title="Crypto Market Dashboard API", lifespan=lifespan)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/dashboard", response_model=DashboardOut)
    async def read_dashboard(dashboard: MarketDashboard = Depends(get_dashboard)):
        return _render(dashboard)

    @app.get("/assets", response_model=list[AssetOut])
    async def search_assets(q: str = "", dashboard: MarketDashboard = Depends(get_dashboard)):
        return [AssetOut(id=a.id, display_name=a.display_name) for a in dashboard.search(q)]

    @app.post("/selection", response_model=DashboardOut)
    async def select_asset(
        body: SelectionRequest,
        dashboard: MarketDashboard = Depends(get_dashboard),
    ):
        try:
            dashboard.select_asset(body.asset_id)
        except UnknownAssetError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _render(dashboard)

    @app.post("/currency", response_model=DashboardOut)
    async def change_currency(
        body: CurrencyRequest,
        dashboard: MarketDashboard = Depends(get_dashboard),
    ):
        dashboard.change_currency(body.currency)
        return _render(dashboard)

    @app.post("/snapshot/reload", response_model=DashboardOut)
    async def reload_snapshot(dashboard: MarketDashboard = Depends(get_dashboard)):
        dashboard.reload_snapshot()
        return _render(dashboard)

    @app.get("/dashboard/stream")
    async def stream_dashboard(dashboard: MarketDashboard = Depends(get_dashboard)):
        """Stream the dashboard view as Server-Sent Events, one per change."""

        async def event_stream():
            queue: asyncio.Queue[DashboardView] = asyncio.Queue(maxsize=1)
            unsubscribe = dashboard.subscribe(latest_view_only(queue))
            try:
                view = dashboard.view
                while True:
                    yield f"data: {_render(dashboard, view).model_dump_json()}\n\n"
                    view = await queue.get()
            finally:
                unsubscribe()

        return StreamingResponse(event_stream(), media_type="text/event-stream")

    return app


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)
