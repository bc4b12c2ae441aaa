"""Matching pass orchestration."""

from .models import ProcessingResult, ProcessingStage
from .runner import MatchOrchestrator

__all__ = ["MatchOrchestrator", "ProcessingResult", "ProcessingStage"]
