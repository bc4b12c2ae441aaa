"""Entry points that start matching passes.

- ItemEventHandler: server-side reaction to item creation (background)
- ItemPostingService: client-side path that posts and then matches directly
- PendingItemSweeper: catch-up for items no trigger has processed
"""

from .events import ItemEventHandler
from .models import ItemDraft, PostItemResult, SweepResult
from .posting import ItemPostingService
from .sweeper import PendingItemSweeper

__all__ = [
    "ItemEventHandler",
    "ItemPostingService",
    "PendingItemSweeper",
    "ItemDraft",
    "PostItemResult",
    "SweepResult",
]
