"""Default configuration values for georeview."""

from __future__ import annotations

from typing import Final

# Number of assets requested from the store per page when neither the caller
# nor the settings file provides a value.
DEFAULT_PAGE_SIZE: Final[int] = 100

# The asset store recomputes derived metadata (city, country) from new
# coordinates in the background. Refetching immediately after a commit would
# show the committed assets as still missing a location, so the refetch is
# postponed by this many milliseconds.
REFETCH_DELAY_MS: Final[int] = 500

# Upper bound on concurrent update requests while committing a batch.
COMMIT_MAX_WORKERS: Final[int] = 8

# Lower-cased substrings marking a filename as a screenshot. Screenshots are
# never auto-accepted because they rarely share the photographer's location.
SCREENSHOT_MARKERS: Final[tuple[str, ...]] = (
    "screenshot",
    "screen shot",
    "screen_shot",
    "screen-shot",
    "bildschirmfoto",
    "capture d'écran",
    "スクリーンショット",
    "截屏",
)

# Reference timeline estimator tolerances.
EXACT_MATCH_TOLERANCE_SEC: Final[float] = 120.0
MAX_INTERPOLATION_GAP_SEC: Final[float] = 3600.0

SETTINGS_FILE_NAME: Final[str] = "settings.json"
SEEN_STORE_FILE_NAME: Final[str] = "seen_assets.json"
APP_DIR_NAME: Final[str] = "georeview"
