"""Maintenance jobs guarded by an authorizer."""

from __future__ import annotations

from src.admin.auth import Authorizer
from src.board.service import BoardService
from src.store.models import ColumnKind
from src.utils.logging import get_logger

logger = get_logger("admin.service")


class AdminService:
    """Runs idempotent maintenance jobs after an authorization check."""

    def __init__(self, board: BoardService, authorize: Authorizer):
        self.board = board
        self.authorize = authorize

    async def run_history_backfill(self, credential: str | None) -> dict[str, object]:
        """Backfill one history entry per application for its current status."""
        self._check(credential, "history backfill")
        return await self.board.history.backfill()

    async def run_status_migration(self, credential: str | None) -> dict[str, int]:
        """Move every user onto the standard default application columns."""
        self._check(credential, "status migration")
        return await self.board.column_manager(ColumnKind.APPLICATION).migrate_defaults()

    def _check(self, credential: str | None, job: str) -> None:
        try:
            self.authorize(credential)
        except Exception:
            logger.warning("Refused %s: unauthorized caller", job)
            raise
