"""Custom exception hierarchy for georeview."""

from __future__ import annotations

from typing import Hashable, Sequence


class GeoReviewError(Exception):
    """Base class for all custom errors raised by georeview."""


# --- 3-layer hierarchy ---

class DomainError(GeoReviewError):
    """Base class for domain-level errors."""


class InfrastructureError(GeoReviewError):
    """Base class for infrastructure-level errors."""


class ApplicationError(GeoReviewError):
    """Base class for application-level errors."""


# --- Domain errors ---

class AssetNotFoundError(DomainError):
    """Raised when the requested asset cannot be located in the store."""


class CandidateNotPendingError(DomainError):
    """Raised when a review decision targets an asset that is not pending."""


class MissingEstimateError(DomainError):
    """Raised when accepting a candidate that has no location to commit."""


# --- Infrastructure errors ---

class StoreError(InfrastructureError):
    """Raised when the asset store rejects or cannot serve a request."""


class SeenStoreError(InfrastructureError):
    """Raised when the persisted seen-set cannot be read or written."""


class TrackLoadError(InfrastructureError):
    """Raised when a movement timeline file cannot be parsed."""


# --- Application errors ---

class FetchError(ApplicationError):
    """Raised when a page cannot be fetched; accumulated state is unchanged."""

    def __init__(self, message: str, page: int) -> None:
        super().__init__(message)
        self.page = page


class CommitError(ApplicationError):
    """Raised when any update of a commit batch fails.

    ``cause`` is the first failure observed, ``failed_asset_ids`` lists every
    asset whose update raised. Updates that succeeded before the failure may
    already be applied by the store; only the review bookkeeping is left
    untouched.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        failed_asset_ids: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.failed_asset_ids = tuple(failed_asset_ids)


class BusyError(ApplicationError):
    """Raised when a non-reentrant operation is invoked while still running."""

    def __init__(self, message: str, key: Hashable | None = None) -> None:
        super().__init__(message)
        self.key = key


# --- Settings errors ---

class SettingsError(GeoReviewError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "ApplicationError",
    "AssetNotFoundError",
    "BusyError",
    "CandidateNotPendingError",
    "CommitError",
    "DomainError",
    "FetchError",
    "GeoReviewError",
    "InfrastructureError",
    "MissingEstimateError",
    "SeenStoreError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "StoreError",
    "TrackLoadError",
]
