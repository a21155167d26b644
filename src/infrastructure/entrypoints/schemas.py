"""
Pydantic request / response models of the HTTP entry point, plus the mapping
from the DashboardView domain object to its display-ready JSON form.
"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.application.services.asset_catalog import AssetCatalog
from src.application.services.formatting import (
    change_direction,
    chart_heading,
    display_name_for,
    format_change,
    format_price,
)
from src.domain.entities.asset import CurrencyCode
from src.domain.entities.dashboard_view import DashboardView
from src.domain.entities.fetch_state import Error, FetchState, Success


class SelectionRequest(BaseModel):
    asset_id: str


class CurrencyRequest(BaseModel):
    currency: CurrencyCode

    @field_validator("currency", mode="before")
    @classmethod
    def _normalize(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class AssetOut(BaseModel):
    id: str
    display_name: str


class SnapshotRowOut(BaseModel):
    asset_id: str
    name: str
    current_price: float
    change_24h_percent: float
    price_display: str
    change_display: str
    direction: str


class ChartOut(BaseModel):
    heading: str
    label: str
    labels: list[str]
    values: list[float]


class SnapshotStateOut(BaseModel):
    status: str
    error: Optional[str] = None
    rows: list[SnapshotRowOut] = []


class HistoryStateOut(BaseModel):
    status: str
    error: Optional[str] = None
    chart: Optional[ChartOut] = None


class SelectionOut(BaseModel):
    asset_id: str
    currency: CurrencyCode
    generation: int


class DashboardOut(BaseModel):
    snapshot: SnapshotStateOut
    history: HistoryStateOut
    assets: list[AssetOut]
    selection: SelectionOut


def _display_name(catalog: AssetCatalog, asset_id: str) -> str:
    return catalog.get(asset_id).display_name if asset_id in catalog else display_name_for(asset_id)


def _error_message(state: FetchState) -> Optional[str]:
    return state.message if isinstance(state, Error) else None


def to_dashboard_out(view: DashboardView, catalog: AssetCatalog, history_days: int) -> DashboardOut:
    rows: list[SnapshotRowOut] = []
    if isinstance(view.snapshot_state, Success):
        for entry in view.snapshot_state.value:
            name = _display_name(catalog, entry.asset_id)
            rows.append(
                SnapshotRowOut(
                    asset_id=entry.asset_id,
                    name=name,
                    current_price=entry.current_price,
                    change_24h_percent=entry.change_24h_percent,
                    price_display=format_price(entry.current_price),
                    change_display=format_change(entry.change_24h_percent),
                    direction=change_direction(entry.change_24h_percent),
                )
            )

    chart = None
    if isinstance(view.history_state, Success):
        series = view.history_state.value
        chart = ChartOut(
            heading=chart_heading(_display_name(catalog, view.selection.asset_id), history_days),
            label=series.label,
            labels=series.labels,
            values=series.values,
        )

    return DashboardOut(
        snapshot=SnapshotStateOut(
            status=view.snapshot_state.status,
            error=_error_message(view.snapshot_state),
            rows=rows,
        ),
        history=HistoryStateOut(
            status=view.history_state.status,
            error=_error_message(view.history_state),
            chart=chart,
        ),
        assets=[AssetOut(id=a.id, display_name=a.display_name) for a in view.filtered_assets],
        selection=SelectionOut(
            asset_id=view.selection.asset_id,
            currency=view.selection.currency,
            generation=view.generation,
        ),
    )
