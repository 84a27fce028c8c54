from .candidate_projector import CandidateProjector, VisibilityResult, filter_visible
from .commit_coordinator import CommitCoordinator, CommitResult
from .pending_edits import PendingEditTracker
from .result_accumulator import ResultAccumulator

__all__ = [
    "CandidateProjector",
    "CommitCoordinator",
    "CommitResult",
    "PendingEditTracker",
    "ResultAccumulator",
    "VisibilityResult",
    "filter_visible",
]
