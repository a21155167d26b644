"""
Application service: the static catalog of supported assets.

Business decisions owned here:
  - Catalog order is the canonical display order.
  - A query that matches nothing falls back to the full catalog.
"""

from typing import Iterable

from src.application.services.formatting import display_name_for
from src.domain.entities.asset import Asset
from src.domain.exceptions import UnknownAssetError

DEFAULT_ASSET_IDS = ("bitcoin", "ethereum", "ripple", "litecoin")


class AssetCatalog:
    def __init__(self, assets: Iterable[Asset]) -> None:
        self._assets: tuple[Asset, ...] = tuple(assets)
        if not self._assets:
            raise ValueError("asset catalog must not be empty")
        self._by_id = {asset.id: asset for asset in self._assets}
        if len(self._by_id) != len(self._assets):
            raise ValueError("asset ids must be unique")

    @classmethod
    def from_ids(cls, asset_ids: Iterable[str] = DEFAULT_ASSET_IDS) -> "AssetCatalog":
        """Build a catalog whose display names are the capitalized ids."""
        assets = []
        for raw_id in asset_ids:
            asset_id = raw_id.strip().lower()
            if asset_id:
                assets.append(Asset(id=asset_id, display_name=display_name_for(asset_id)))
        return cls(assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._by_id

    def all(self) -> list[Asset]:
        return list(self._assets)

    def ids(self) -> list[str]:
        return [asset.id for asset in self._assets]

    def get(self, asset_id: str) -> Asset:
        """Return the asset for *asset_id*.

        Raises:
            UnknownAssetError: if the id is not in the catalog.
        """
        try:
            return self._by_id[asset_id]
        except KeyError:
            raise UnknownAssetError(asset_id) from None

    def filter(self, query: str) -> list[Asset]:
        """Return assets whose id or display name contains *query*, in catalog order.

        An empty query, or one that matches nothing, returns the full catalog.
        """
        needle = query.strip().casefold()
        if not needle:
            return self.all()
        matches = [
            asset
            for asset in self._assets
            if needle in asset.id.casefold() or needle in asset.display_name.casefold()
        ]
        return matches or self.all()
