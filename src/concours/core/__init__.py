"\"\"\"Core admission engine components.\"\"\""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .credentials import credentials_match, generate_password
from .deadline import Countdown, DeadlineClock, is_expired, time_left
from .notifications import NotificationDispatcher
from .ranking import (
    RankedApplicant,
    RankingEngine,
    StageEntry,
    StageRankingKey,
    WrittenExamResults,
    within_capacity,
)
from .reference import ReferenceCatalog
from .scoring import ScoreCalculator, compute_score
from .workflow import TRANSITIONS, StatusWorkflow, TransitionRecord, plan_transition

__all__ = [
    "credentials_match",
    "generate_password",
    "Countdown",
    "DeadlineClock",
    "is_expired",
    "time_left",
    "NotificationDispatcher",
    "RankedApplicant",
    "RankingEngine",
    "StageEntry",
    "StageRankingKey",
    "WrittenExamResults",
    "within_capacity",
    "ReferenceCatalog",
    "ScoreCalculator",
    "compute_score",
    "TRANSITIONS",
    "StatusWorkflow",
    "TransitionRecord",
    "plan_transition",
]
