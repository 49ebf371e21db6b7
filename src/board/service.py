"""Board service wiring the managers around one repository.

This module provides the BoardService class, the entry point callers use
instead of constructing the managers one by one:
- One StatusColumnManager per board kind
- One ItemPlacementManager for applications and study problems
- One HistoryRecorder
All of them share a single OwnerLocks registry, so column and item
mutations for the same owner and board are serialized together.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from src.board.columns import StatusColumnManager
from src.board.history import HistoryRecorder
from src.board.locks import OwnerLocks
from src.board.placement import ItemPlacementManager
from src.board.templates import DEFAULT_COLUMNS, ColumnTemplate
from src.store.models import ColumnKind
from src.store.repository import BoardRepository


class BoardService:
    """Facade over the column, placement and history managers."""

    def __init__(
        self,
        repository: BoardRepository,
        templates: Mapping[ColumnKind, Sequence[ColumnTemplate]] | None = None,
    ):
        """Initialize the service.

        Args:
            repository: The BoardRepository instance for database access.
            templates: Default columns per board kind (see ``load_board_template``).
        """
        self.repository = repository
        self.locks = OwnerLocks()
        self.history = HistoryRecorder(repository)
        templates = templates or DEFAULT_COLUMNS
        self.columns = {
            kind: StatusColumnManager(
                repository,
                kind,
                locks=self.locks,
                defaults=templates.get(kind, DEFAULT_COLUMNS[kind]),
            )
            for kind in ColumnKind
        }
        self.items = ItemPlacementManager(repository, locks=self.locks, history=self.history)

    def column_manager(self, kind: ColumnKind | str) -> StatusColumnManager:
        return self.columns[ColumnKind(kind)]

    async def seed_owner(self, owner_id: str) -> dict[str, list[str]]:
        """Seed the default columns of every board for a new owner."""
        return {
            kind.value: await manager.seed_defaults(owner_id)
            for kind, manager in self.columns.items()
        }
