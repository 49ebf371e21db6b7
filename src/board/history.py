"""Status history for applications.

Entries are append-only snapshots of a status an application entered.
At most one entry exists per (item, status) pair, which makes both live
recording and the one-time backfill safe to repeat.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime

from src.store.models import (
    ColumnKind,
    StatusColumn,
    StatusHistoryEntry,
    new_id,
    utcnow,
)
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("board.history")


class HistoryRecorder:
    """Writes and reads the application status history."""

    def __init__(self, repository: BoardRepository):
        self.repository = repository

    async def record_transition(
        self,
        item_id: str,
        owner_id: str,
        status: StatusColumn,
        created_at: datetime | None = None,
    ) -> str | None:
        """Record that an item entered ``status``.

        Args:
            item_id: The item that changed status.
            owner_id: Owner of the item.
            status: The column the item entered.
            created_at: When it happened; defaults to now.

        Returns:
            The new entry id, or None if the pair was already recorded.
        """
        if await self.repository.find_history(item_id, status.id) is not None:
            return None

        entry = StatusHistoryEntry(
            id=new_id(),
            owner_id=owner_id,
            item_id=item_id,
            status_id=status.id,
            status_name=status.name.lower(),
            created_at=created_at or utcnow(),
        )
        try:
            await self.repository.insert_history(entry)
        except sqlite3.IntegrityError:
            # Recorded by a concurrent writer between lookup and insert
            return None
        return entry.id

    async def list_history(self, owner_id: str) -> list[StatusHistoryEntry]:
        """Return the owner's history entries, oldest first."""
        entries = await self.repository.list_history(owner_id)
        return sorted(entries, key=lambda entry: entry.created_at)

    async def count_unique_status_entries(self, owner_id: str) -> dict[str, int]:
        """Count distinct items that ever entered each status name."""
        seen: dict[str, set[str]] = {}
        for entry in await self.repository.list_history(owner_id):
            seen.setdefault(entry.status_name.lower(), set()).add(entry.item_id)
        return {name: len(item_ids) for name, item_ids in seen.items()}

    async def backfill(self) -> dict[str, object]:
        """Create one entry per application for its current status.

        Applications whose status column no longer exists are skipped.
        Only the current status can be derived, so earlier transitions
        of an application are not reconstructed.
        """
        applications = await self.repository.list_items(ColumnKind.APPLICATION)
        created = 0

        for application in applications:
            status = await self.repository.get_column(application.status_id)
            if status is None:
                continue
            entry_id = await self.record_transition(
                application.id,
                application.owner_id,
                status,
                created_at=application.created_at,
            )
            if entry_id is not None:
                created += 1

        logger.info(
            "History backfill scanned %d applications, created %d entries",
            len(applications),
            created,
        )
        return {
            "message": "Migration completed successfully",
            "count": len(applications),
        }
