"""
Domain error taxonomy.

ProviderError and its subclass MalformedPayloadError are raised by market data
adapters; StaleResultDiscarded is an internal signal of the fetch state machine
and never leaves it.
"""


class ProviderError(Exception):
    """The market data provider failed (non-2xx status or transport failure)."""


class MalformedPayloadError(ProviderError):
    """The provider answered, but the payload lacks required fields."""


class StaleResultDiscarded(Exception):
    """A completed fetch belongs to a superseded generation."""

    def __init__(self, concern: str, generation: int, in_flight: int) -> None:
        super().__init__(
            f"{concern}: discarding result of generation {generation} "
            f"(in flight: {in_flight})"
        )
        self.concern = concern
        self.generation = generation
        self.in_flight = in_flight


class UnknownAssetError(ValueError):
    """The requested asset id is not part of the catalog."""

    def __init__(self, asset_id: str) -> None:
        super().__init__(f"Unknown asset: {asset_id!r}")
        self.asset_id = asset_id
