"""Status boards: ordered columns and the items placed in them.

Public API:
- BoardService: Facade wiring the managers around one repository
- StatusColumnManager: Dense, ordered status columns per owner and board
- ItemPlacementManager: Applications and study problems inside columns
- HistoryRecorder: Append-only application status history
- OwnerLocks: Per-owner mutation serialization
- BoardError, NotFoundError, InvalidOperationError, UnauthorizedError
"""

from src.board.columns import StatusColumnManager
from src.board.errors import (
    BoardError,
    InvalidOperationError,
    NotFoundError,
    UnauthorizedError,
)
from src.board.history import HistoryRecorder
from src.board.locks import OwnerLocks
from src.board.placement import ItemPlacementManager
from src.board.service import BoardService

__all__ = [
    "BoardService",
    "StatusColumnManager",
    "ItemPlacementManager",
    "HistoryRecorder",
    "OwnerLocks",
    "BoardError",
    "NotFoundError",
    "InvalidOperationError",
    "UnauthorizedError",
]
