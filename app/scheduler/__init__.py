"""Scheduling of the periodic pending-item sweep."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
