"""
Display formatting shared by the chart transformer and the presentation layer.
Pure functions only; no I/O and no external dependencies.
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional

from src.domain.entities.asset import CurrencyCode

DEFAULT_DATE_FORMAT = "%d.%m.%Y"


def display_name_for(asset_id: str) -> str:
    """Capitalize the first letter of a canonical id ('bitcoin' -> 'Bitcoin')."""
    return asset_id[:1].upper() + asset_id[1:]


def series_label(display_name: str, currency: CurrencyCode) -> str:
    return f"{display_name} ({currency.value})"


def chart_heading(display_name: str, days: int) -> str:
    return f"{days}-day chart - {display_name}"


def date_label(
    timestamp_millis: int,
    date_format: str = DEFAULT_DATE_FORMAT,
    tz: Optional[tzinfo] = timezone.utc,
) -> str:
    """Format an epoch-millisecond timestamp as a calendar date (day granularity)."""
    return datetime.fromtimestamp(timestamp_millis / 1000, tz=tz).strftime(date_format)


def format_price(price: float) -> str:
    return f"{price:.2f}"


def format_change(change_percent: float) -> str:
    return f"{change_percent:.2f}%"


def change_direction(change_percent: float) -> str:
    """'up' for a strictly positive change, 'down' otherwise."""
    return "up" if change_percent > 0 else "down"
