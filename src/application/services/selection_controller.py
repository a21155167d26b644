"""
Application service: owner of the current Selection and its generation counter.

Every select() call overwrites the selection, bumps the generation and notifies
listeners synchronously, before any asynchronous work is scheduled. Fetches are
tagged with that generation so late results of superseded selections can be
recognized and dropped.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from src.domain.entities.asset import CurrencyCode
from src.domain.entities.market_data import Selection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionChanged:
    selection: Selection
    generation: int


SelectionListener = Callable[[SelectionChanged], None]


class SelectionController:
    def __init__(
        self,
        initial: Selection,
        validate_asset: Optional[Callable[[str], object]] = None,
    ) -> None:
        """
        Args:
            initial:        Selection in effect before the first select().
            validate_asset: Called with every asset id before it is applied; raises
                            (e.g. AssetCatalog.get -> UnknownAssetError) to reject it.
        """
        self._validate_asset = validate_asset
        if validate_asset is not None:
            validate_asset(initial.asset_id)
        self._selection = initial
        self._generation = 0
        self._listeners: list[SelectionListener] = []

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def select(self, asset_id: str, currency: CurrencyCode) -> int:
        """Replace the selection and return the new generation.

        A rejected asset id leaves the selection and the generation untouched.
        """
        if self._validate_asset is not None:
            self._validate_asset(asset_id)
        self._selection = Selection(asset_id=asset_id, currency=currency)
        self._generation += 1
        event = SelectionChanged(selection=self._selection, generation=self._generation)
        logger.debug(
            "Selection -> %s/%s (generation %d)",
            asset_id, currency.value, self._generation,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Selection listener failed for generation %d", event.generation)
        return self._generation
