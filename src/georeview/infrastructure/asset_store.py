"""Local asset stores implementing ``IAssetStore``.

``InMemoryAssetStore`` keeps assets in a dict and is what the tests drive.
``JsonAssetStore`` adds a JSON document on disk so the command line can
review an exported library and write coordinates back to it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from georeview.domain.models import Asset, FilterCriteria, GeoPoint, SearchPage
from georeview.domain.ports import IAssetStore
from georeview.errors import AssetNotFoundError, StoreError
from georeview.utils.jsonio import read_json, write_json
from georeview.utils.timeutils import parse_timestamp, to_epoch

LOGGER = logging.getLogger(__name__)

Geocoder = Callable[[GeoPoint], Optional[str]]


def matches(asset: Asset, criteria: FilterCriteria) -> bool:
    """Whether *asset* lacks a location and falls inside *criteria*."""
    if asset.has_location:
        return False
    if criteria.tag_ids and not criteria.tag_ids.issubset(asset.tag_ids):
        return False
    if criteria.is_not_in_album and asset.album_ids:
        return False
    if criteria.camera_model is not None and asset.camera_model != criteria.camera_model:
        return False
    return True


class InMemoryAssetStore(IAssetStore):
    def __init__(self, assets: Iterable[Asset] = (), geocoder: Optional[Geocoder] = None) -> None:
        self._assets: Dict[str, Asset] = {asset.id: asset for asset in assets}
        self._geocoder = geocoder
        self._lock = threading.RLock()

    def get(self, asset_id: str) -> Optional[Asset]:
        with self._lock:
            return self._assets.get(asset_id)

    def all(self) -> List[Asset]:
        with self._lock:
            return list(self._assets.values())

    def search(self, criteria: FilterCriteria, page: int, page_size: int) -> SearchPage:
        if page < 1 or page_size < 1:
            raise StoreError(f"Invalid pagination: page={page}, page_size={page_size}")
        with self._lock:
            found = [asset for asset in self._assets.values() if matches(asset, criteria)]
        found.sort(key=lambda asset: (to_epoch(asset.created_at), asset.id))
        offset = (page - 1) * page_size
        return SearchPage(
            items=found[offset : offset + page_size],
            has_next_page=offset + page_size < len(found),
        )

    def update(self, asset_id: str, point: GeoPoint) -> None:
        location_name = self._geocoder(point) if self._geocoder else None
        with self._lock:
            asset = self._assets.get(asset_id)
            if asset is None:
                raise AssetNotFoundError(f"Asset {asset_id} does not exist")
            self._assets[asset_id] = replace(
                asset,
                latitude=point.lat,
                longitude=point.lng,
                location_name=location_name,
            )
            self._after_update(asset_id)
        LOGGER.debug("Stored %s at %.6f,%.6f (%s)", asset_id, point.lat, point.lng, location_name or "-")

    def _after_update(self, asset_id: str) -> None:
        """Hook run under the store lock once *asset_id* was updated."""


def asset_from_dict(row: Mapping[str, Any]) -> Asset:
    asset_id = row.get("id")
    if not isinstance(asset_id, str) or not asset_id:
        raise ValueError(f"Asset row without an id: {row!r}")
    if "created_at" not in row:
        raise ValueError(f"Asset {asset_id} has no created_at")

    def _coordinate(key: str) -> Optional[float]:
        value = row.get(key)
        return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else None

    return Asset(
        id=asset_id,
        created_at=parse_timestamp(row["created_at"]),
        original_file_name=str(row.get("original_file_name") or ""),
        tag_ids=frozenset(str(tag) for tag in row.get("tag_ids") or ()),
        album_ids=frozenset(str(album) for album in row.get("album_ids") or ()),
        camera_model=row.get("camera_model") or None,
        latitude=_coordinate("latitude"),
        longitude=_coordinate("longitude"),
        location_name=row.get("location_name") or None,
    )


def asset_to_dict(asset: Asset) -> Dict[str, Any]:
    return {
        "id": asset.id,
        "created_at": asset.created_at.isoformat(),
        "original_file_name": asset.original_file_name,
        "tag_ids": sorted(asset.tag_ids),
        "album_ids": sorted(asset.album_ids),
        "camera_model": asset.camera_model,
        "latitude": asset.latitude,
        "longitude": asset.longitude,
        "location_name": asset.location_name,
    }


class JsonAssetStore(InMemoryAssetStore):
    """Asset store backed by ``{"assets": [...]}`` on disk.

    Every successful update rewrites the document when ``autosave`` is on.
    """

    def __init__(self, path: Path, geocoder: Optional[Geocoder] = None, autosave: bool = True) -> None:
        super().__init__(geocoder=geocoder)
        self._path = path
        self._autosave = autosave

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        try:
            payload = read_json(self._path)
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read asset file {self._path}: {exc}") from exc
        rows = payload.get("assets") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise StoreError(f"{self._path} does not contain an 'assets' list")
        assets: Dict[str, Asset] = {}
        for row in rows:
            try:
                asset = asset_from_dict(row)
            except (TypeError, ValueError) as exc:
                raise StoreError(f"Invalid asset row in {self._path}: {exc}") from exc
            assets[asset.id] = asset
        with self._lock:
            self._assets = assets
        LOGGER.info("Loaded %d assets from %s", len(assets), self._path)

    def save(self) -> None:
        with self._lock:
            payload = {"assets": [asset_to_dict(asset) for asset in self._assets.values()]}
            try:
                write_json(self._path, payload)
            except OSError as exc:
                raise StoreError(f"Cannot write asset file {self._path}: {exc}") from exc

    def _after_update(self, asset_id: str) -> None:
        if self._autosave:
            self.save()


__all__ = ["InMemoryAssetStore", "JsonAssetStore", "asset_from_dict", "asset_to_dict", "matches"]
