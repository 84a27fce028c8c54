"""Seen-set stores: the asset ids a reviewer chose to hide."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from georeview.domain.ports import ISeenSetStore
from georeview.errors import SeenStoreError
from georeview.utils.jsonio import read_json, write_json

LOGGER = logging.getLogger(__name__)

SEEN_SCHEMA_ID = "georeview/seen@1"

SEEN_STORE_SCHEMA: dict[str, Any] = {
    "$id": "georeview/seen.schema.json",
    "type": "object",
    "required": ["schema", "asset_ids"],
    "properties": {
        "schema": {"const": SEEN_SCHEMA_ID},
        "asset_ids": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "uniqueItems": True,
        },
    },
    "additionalProperties": False,
}

_validator = Draft202012Validator(SEEN_STORE_SCHEMA)


class InMemorySeenSetStore(ISeenSetStore):
    """Process-local seen-set, for tests and throwaway sessions."""

    def __init__(self, asset_ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(asset_ids)
        self._lock = threading.Lock()

    def add(self, asset_ids: Iterable[str]) -> None:
        with self._lock:
            self._ids.update(asset_ids)

    def discard(self, asset_ids: Iterable[str]) -> None:
        with self._lock:
            self._ids.difference_update(asset_ids)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._ids

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)


class JsonSeenSetStore(InMemorySeenSetStore):
    """Seen-set persisted to a JSON document after every mutation.

    The store starts empty; call :meth:`load` before use to pick up ids
    saved by earlier sessions. A missing file is treated as an empty set.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = path
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        payload: Optional[Any] = None
        if self._path.exists():
            try:
                payload = read_json(self._path)
                _validator.validate(payload)
            except ValidationError as exc:
                raise SeenStoreError(f"{self._path} is not a valid seen-set file: {exc.message}") from exc
            except (OSError, ValueError) as exc:
                raise SeenStoreError(f"Cannot read seen-set file {self._path}: {exc}") from exc
        with self._lock:
            self._ids = set(payload["asset_ids"]) if payload else set()
        self._loaded = True
        LOGGER.debug("Loaded %d hidden asset ids from %s", len(self._ids), self._path)

    def add(self, asset_ids: Iterable[str]) -> None:
        ids = list(asset_ids)
        if not ids:
            return
        with self._lock:
            self._replace(self._ids.union(ids))

    def discard(self, asset_ids: Iterable[str]) -> None:
        ids = list(asset_ids)
        if not ids:
            return
        with self._lock:
            self._replace(self._ids.difference(ids))

    def _replace(self, ids: set[str]) -> None:
        """Persist *ids*, then make them the current set. Caller holds the lock."""
        payload = {"schema": SEEN_SCHEMA_ID, "asset_ids": sorted(ids)}
        try:
            write_json(self._path, payload)
        except OSError as exc:
            raise SeenStoreError(f"Cannot write seen-set file {self._path}: {exc}") from exc
        self._ids = ids


__all__ = ["InMemorySeenSetStore", "JsonSeenSetStore", "SEEN_STORE_SCHEMA"]
