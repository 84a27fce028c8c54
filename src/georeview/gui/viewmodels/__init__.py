"""Pure Python ViewModels; importing this package never loads Qt."""

from .base import BaseViewModel
from .review_viewmodel import CommitOutcome, FetchOutcome, ReviewViewModel
from .signal import ObservableProperty, Signal
from .status_viewmodel import ReviewStatusViewModel

__all__ = [
    "BaseViewModel",
    "CommitOutcome",
    "FetchOutcome",
    "ObservableProperty",
    "ReviewStatusViewModel",
    "ReviewViewModel",
    "Signal",
]
