"""
Domain entities for catalog assets and quote currencies.
Zero external dependencies - pure Python dataclasses and enums only.
"""

from dataclasses import dataclass
from enum import Enum


class CurrencyCode(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    PLN = "PLN"

    @classmethod
    def parse(cls, value: str) -> "CurrencyCode":
        """Return the member for *value* (case-insensitive).

        Raises:
            ValueError: if *value* is not a supported currency.
        """
        try:
            return cls(value.strip().upper())
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unsupported currency {value!r}; expected one of: {supported}"
            ) from None


@dataclass(frozen=True)
class Asset:
    id: str
    display_name: str
