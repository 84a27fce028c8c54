"""Working set of review decisions, reconciled against each re-projection.

Every time the visible candidate list changes (a page arrives, an asset is
hidden or unhidden) it is merged into the tracker with two ordered passes:

1. *fill* - a visible id with no entry, or whose entry has no estimate yet,
   takes the freshly projected candidate. An entry that already carries an
   estimate is left alone, so accept/reject toggles and manually dragged
   points survive re-projection.
2. *prune* - ids that are no longer visible are collected first and then
   removed from the mapping.

Afterwards the tracker's keys are exactly the visible ids.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Sequence

from georeview.domain.models import ConfidenceSource, Estimate, GeoPoint, ReviewCandidate
from georeview.errors import CandidateNotPendingError, MissingEstimateError

LOGGER = logging.getLogger(__name__)


class PendingEditTracker:
    """Identity-keyed mapping of asset id to :class:`ReviewCandidate`."""

    def __init__(self) -> None:
        self._edits: Dict[str, ReviewCandidate] = {}
        self._order: List[str] = []

    # -- reconciliation ------------------------------------------------------

    def merge(self, visible: Sequence[ReviewCandidate]) -> None:
        visible_ids: List[str] = []
        inserted = 0
        for candidate in visible:
            asset_id = candidate.asset.id
            visible_ids.append(asset_id)
            existing = self._edits.get(asset_id)
            if existing is None or existing.estimate is None:
                self._edits[asset_id] = candidate
                inserted += 1

        keep = set(visible_ids)
        stale = [asset_id for asset_id in self._edits if asset_id not in keep]
        for asset_id in stale:
            del self._edits[asset_id]

        self._order = visible_ids
        LOGGER.debug(
            "Merged %d visible candidates: %d filled, %d pruned",
            len(visible_ids),
            inserted,
            len(stale),
        )

    def clear(self) -> None:
        self._edits.clear()
        self._order = []

    # -- queries ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._edits)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._edits

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def get(self, asset_id: str) -> Optional[ReviewCandidate]:
        return self._edits.get(asset_id)

    def keys(self) -> set[str]:
        return set(self._edits)

    @property
    def candidates(self) -> List[ReviewCandidate]:
        """Entries in the order the visible list presented them."""
        return [self._edits[asset_id] for asset_id in self._order]

    @property
    def confirmed_edits(self) -> List[ReviewCandidate]:
        return [candidate for candidate in self.candidates if candidate.accepted]

    def unaccepted_ids(self) -> List[str]:
        return [candidate.asset.id for candidate in self.candidates if not candidate.accepted]

    def snapshot(self) -> Dict[str, ReviewCandidate]:
        return dict(self._edits)

    # -- user decisions --------------------------------------------------------

    def set_accepted(self, asset_id: str, accepted: bool) -> ReviewCandidate:
        candidate = self._require(asset_id)
        if accepted and candidate.estimate is None:
            raise MissingEstimateError(f"Asset {asset_id} has no estimated location to accept")
        if candidate.accepted == accepted:
            return candidate
        updated = replace(candidate, accepted=accepted)
        self._edits[asset_id] = updated
        return updated

    def toggle(self, asset_id: str) -> ReviewCandidate:
        return self.set_accepted(asset_id, not self._require(asset_id).accepted)

    def set_all_accepted(self, accepted: bool) -> int:
        """Apply *accepted* to every pending entry; returns how many changed.

        Entries without an estimate cannot be committed and stay rejected.
        """
        changed = 0
        for asset_id, candidate in list(self._edits.items()):
            target = accepted and candidate.estimate is not None
            if candidate.accepted != target:
                self._edits[asset_id] = replace(candidate, accepted=target)
                changed += 1
        return changed

    def relocate(self, asset_id: str, point: GeoPoint) -> ReviewCandidate:
        """Move the estimate to *point*, as when the user drags the marker.

        A candidate without an estimate receives a manual one. Either way the
        entry becomes accepted and is protected from later merges.
        """
        candidate = self._require(asset_id)
        if candidate.estimate is None:
            estimate = Estimate(point=point, confidence_source=ConfidenceSource.MANUAL)
        else:
            estimate = replace(candidate.estimate, point=point)
        updated = replace(candidate, estimate=estimate, accepted=True)
        self._edits[asset_id] = updated
        LOGGER.debug("Relocated %s to %.6f,%.6f", asset_id, point.lat, point.lng)
        return updated

    def _require(self, asset_id: str) -> ReviewCandidate:
        try:
            return self._edits[asset_id]
        except KeyError:
            raise CandidateNotPendingError(f"Asset {asset_id} is not pending review") from None


__all__ = ["PendingEditTracker"]
