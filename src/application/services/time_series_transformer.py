"""
Application service: raw provider price series -> chart-ready series.

Input order is preserved as received (the provider returns ascending
timestamps). Several points on one calendar day yield repeated labels.
"""

from datetime import timezone, tzinfo
from typing import Optional, Sequence

from src.application.services.formatting import DEFAULT_DATE_FORMAT, date_label, series_label
from src.domain.entities.asset import CurrencyCode
from src.domain.entities.market_data import ChartSeries, PricePoint


class TimeSeriesTransformer:
    def __init__(
        self,
        date_format: str = DEFAULT_DATE_FORMAT,
        tz: Optional[tzinfo] = timezone.utc,
    ) -> None:
        self._date_format = date_format
        self._tz = tz

    def to_chart_series(
        self,
        points: Sequence[PricePoint],
        asset_display_name: str,
        currency: CurrencyCode,
    ) -> ChartSeries:
        labels = [
            date_label(point.timestamp_millis, self._date_format, self._tz)
            for point in points
        ]
        values = [point.price for point in points]
        return ChartSeries(
            label=series_label(asset_display_name, currency),
            labels=labels,
            values=values,
        )
