"""Indexed record storage for the board.

Public API:
- BoardRepository: async SQLite repository (point lookups, scans, row writes)
- StatusColumn, Application, StudyProblem, Company, Referral,
  MessageTemplate, StatusHistoryEntry, UserProfile: stored record types
- ColumnKind: which board a column belongs to
"""

from src.store.models import (
    Application,
    ColumnKind,
    Company,
    MessageTemplate,
    Referral,
    StatusColumn,
    StatusHistoryEntry,
    StudyProblem,
    UserProfile,
)
from src.store.repository import BoardRepository

__all__ = [
    "BoardRepository",
    "StatusColumn",
    "Application",
    "StudyProblem",
    "Company",
    "Referral",
    "MessageTemplate",
    "StatusHistoryEntry",
    "UserProfile",
    "ColumnKind",
]
