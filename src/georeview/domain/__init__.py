from .models import (
    Asset,
    ConfidenceSource,
    Estimate,
    FilterCriteria,
    GeoPoint,
    Polyline,
    ReviewCandidate,
    SearchPage,
)

__all__ = [
    "Asset",
    "ConfidenceSource",
    "Estimate",
    "FilterCriteria",
    "GeoPoint",
    "Polyline",
    "ReviewCandidate",
    "SearchPage",
]
