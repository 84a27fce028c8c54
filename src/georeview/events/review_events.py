from dataclasses import dataclass, field
from typing import Tuple

from .bus import Event


@dataclass(kw_only=True)
class PageFetchedEvent(Event):
    page: int
    item_count: int
    has_next_page: bool


@dataclass(kw_only=True)
class EditsCommittedEvent(Event):
    committed_ids: Tuple[str, ...] = ()
    hidden_ids: Tuple[str, ...] = ()
    resume_page: int = 1


@dataclass(kw_only=True)
class AssetsHiddenEvent(Event):
    asset_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(kw_only=True)
class AssetsUnhiddenEvent(Event):
    asset_ids: Tuple[str, ...] = field(default_factory=tuple)
